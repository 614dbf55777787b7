from __future__ import annotations

import operator


class ArgumentOutOfRangeError(ValueError):
    def __init__(self, param_name: str, message: str) -> None:
        super().__init__(f"{param_name}: {message}")
        self.param_name = param_name


def coerce_int(param_name: str, value: object, *, low: int, high: int) -> int:
    """Return ``value`` as a Python int, checking it fits in ``[low, high]``."""

    try:
        as_int = operator.index(value)
    except TypeError as exc:
        raise TypeError(
            f"{param_name} must be an integer, got {type(value).__name__}"
        ) from exc
    if not low <= as_int <= high:
        raise ArgumentOutOfRangeError(param_name, f"{as_int} is outside [{low}, {high}]")
    return as_int


def check_non_negative(param_name: str, value: int) -> None:
    if value < 0:
        raise ArgumentOutOfRangeError(param_name, f"must be non-negative, got {value}")


def check_ordered(min_value: int, max_value: int) -> None:
    if min_value > max_value:
        raise ArgumentOutOfRangeError(
            "min_value",
            f"min_value ({min_value}) cannot be greater than max_value ({max_value})",
        )
