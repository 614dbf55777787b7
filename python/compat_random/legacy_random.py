from __future__ import annotations

import operator
from typing import Any

import numpy as np

from .constants import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN
from .errors import coerce_int
from .shared import shared_seed
from .strategies import OverridableStrategy, SeededStrategy, StrategyKind


def _shape(size: int | tuple[int, ...]) -> tuple[int, ...]:
    try:
        return (operator.index(size),)
    except TypeError:
        return tuple(operator.index(dim) for dim in size)


def select_strategy(front: LegacyRandom, seed: int) -> SeededStrategy | OverridableStrategy:
    if type(front) is LegacyRandom:
        return SeededStrategy(seed)
    return OverridableStrategy(front, seed)


class LegacyRandom:
    """Seeded generator reproducing the historical subtractive sequence.

    Instances of ``LegacyRandom`` itself read straight from an eagerly seeded
    engine. Subclasses get a lazily seeded engine and every composite operation
    goes back through ``self.sample()`` / ``self.next_int()``, so overriding
    either one changes everything derived from it.

    Not thread-safe: every call, including lazy seeding, mutates internal state.
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = shared_seed()
        self._seed = coerce_int("seed", seed, low=INT32_MIN, high=INT32_MAX)
        self._impl = select_strategy(self, self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def strategy_kind(self) -> StrategyKind:
        return self._impl.kind

    def sample(self) -> float:
        """Return a double in ``[0.0, 1.0)``. Subclasses may override this."""

        return self._impl.sample()

    def next_int(self, low: int | None = None, high: int | None = None) -> int:
        """Raw sample with no arguments, ``[0, low)`` with one, ``[low, high)`` with two."""

        if low is None:
            if high is not None:
                raise TypeError("next_int() got high without low")
            return self._impl.next()

        low = coerce_int("low", low, low=INT32_MIN, high=INT32_MAX)
        if high is None:
            return self._impl.next_max(low)

        high = coerce_int("high", high, low=INT32_MIN, high=INT32_MAX)
        return self._impl.next_range(low, high)

    def next_int64(self, low: int | None = None, high: int | None = None) -> int:
        """64-bit counterpart of ``next_int``; the no-argument form never returns ``INT64_MAX``."""

        if low is None:
            if high is not None:
                raise TypeError("next_int64() got high without low")
            return self._impl.next_int64()

        low = coerce_int("low", low, low=INT64_MIN, high=INT64_MAX)
        if high is None:
            return self._impl.next_int64_max(low)

        high = coerce_int("high", high, low=INT64_MIN, high=INT64_MAX)
        return self._impl.next_int64_range(low, high)

    def next_double(self) -> float:
        return self._impl.next_double()

    def next_single(self) -> float:
        return self._impl.next_single()

    def next_bytes(self, buffer: Any) -> None:
        self._impl.next_bytes(buffer)

    def fill_bytes(self, buffer: Any) -> None:
        self._impl.fill_bytes(buffer)

    def randbytes(self, n: int) -> bytes:
        buffer = bytearray(int(n))
        self.fill_bytes(buffer)
        return bytes(buffer)

    def random(self, size: int | tuple[int, ...] | None = None) -> float | np.ndarray:
        if size is None:
            return self.next_double()

        arr = np.empty(_shape(size), dtype=np.float64)
        flat = arr.reshape(-1)
        for i in range(flat.size):
            flat[i] = self.next_double()
        return arr

    def integers(
        self,
        low: int,
        high: int | None = None,
        size: int | tuple[int, ...] | None = None,
    ) -> int | np.ndarray:
        def draw() -> int:
            return self.next_int(low) if high is None else self.next_int(low, high)

        if size is None:
            return draw()

        arr = np.empty(_shape(size), dtype=np.int64)
        flat = arr.reshape(-1)
        for i in range(flat.size):
            flat[i] = draw()
        return arr
