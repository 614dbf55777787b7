"""Calling conventions layered over the subtractive engine.

``SeededStrategy`` reads everything straight from its engine. ``OverridableStrategy``
routes composite operations back through the owning front object so that a
subclass overriding ``sample()`` (or ``next_int()``) sees its override reflected in
bounded integers, 64-bit values and byte buffers.
"""

from __future__ import annotations

import abc
import enum
from collections.abc import Callable
from typing import Any, Protocol

import numpy as np

from .constants import (
    INT32_MAX,
    INT64_MAX,
    UINT64_HIGH_BITS,
    UINT64_LOW_BITS,
    UINT64_MID_BITS,
)
from .errors import check_non_negative, check_ordered
from .subtractive_engine import SubtractiveEngine

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1

BoundedDraw = Callable[[int], int]
DoubleDraw = Callable[[], float]


class StrategyKind(enum.Enum):
    SEEDED = "seeded"
    OVERRIDABLE = "overridable"


class OverridableFront(Protocol):
    """The override-capable entry points an ``OverridableStrategy`` calls back into."""

    def sample(self) -> float: ...

    def next_int(self, low: int | None = None, high: int | None = None) -> int: ...


def _log2_ceiling(value: int) -> int:
    return (value - 1).bit_length()


def _to_single(value: float) -> float:
    return float(np.float32(value))


class _CompatStrategy(abc.ABC):
    kind: StrategyKind

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._engine = SubtractiveEngine()

    def _compose_uint64(self, draw_bounded: BoundedDraw) -> int:
        low = draw_bounded(1 << UINT64_LOW_BITS) & _MASK32
        mid = draw_bounded(1 << UINT64_MID_BITS) & _MASK32
        high = draw_bounded(1 << UINT64_HIGH_BITS) & _MASK32
        composed = low | (mid << UINT64_LOW_BITS) | (high << (UINT64_LOW_BITS + UINT64_MID_BITS))
        return composed & _MASK64

    def next_int64(self) -> int:
        while True:
            # Top 63 bits cover [0, INT64_MAX]; INT64_MAX itself is excluded.
            result = self._next_uint64() >> 1
            if result != INT64_MAX:
                return result

    def next_int64_max(self, max_value: int) -> int:
        check_non_negative("max_value", max_value)
        return self.next_int64_range(0, max_value)

    def _next_int64_in(self, min_value: int, exclusive_range: int) -> int:
        bits = _log2_ceiling(exclusive_range)
        while True:
            result = self._next_uint64() >> (64 - bits)
            if result < exclusive_range:
                return result + min_value

    def _single_from(self, draw_double: DoubleDraw) -> float:
        while True:
            f = _to_single(draw_double())
            # Narrowing can round values just below 1.0 up to 1.0.
            if f < 1.0:
                return f

    @abc.abstractmethod
    def _next_uint64(self) -> int: ...


class SeededStrategy(_CompatStrategy):
    """Eagerly seeded strategy used when nothing can override the primitives."""

    kind = StrategyKind.SEEDED

    def __init__(self, seed: int) -> None:
        super().__init__(seed)
        self._engine.initialize(self.seed)

    def sample(self) -> float:
        return self._engine.sample()

    def next(self) -> int:
        return self._engine.internal_sample()

    def next_max(self, max_value: int) -> int:
        check_non_negative("max_value", max_value)
        # The scaled sample is below 2**52 so int() truncation is exact.
        return int(self._engine.sample() * max_value)

    def next_range(self, min_value: int, max_value: int) -> int:
        check_ordered(min_value, max_value)
        range_ = max_value - min_value
        if range_ <= INT32_MAX:
            return int(self._engine.sample() * range_) + min_value
        return int(self._engine.get_sample_for_large_range() * range_) + min_value

    def _next_uint64(self) -> int:
        return self._compose_uint64(self.next_max)

    def next_int64_range(self, min_value: int, max_value: int) -> int:
        check_ordered(min_value, max_value)
        exclusive_range = max_value - min_value
        if exclusive_range > 1:
            return self._next_int64_in(min_value, exclusive_range)
        return min_value

    def next_double(self) -> float:
        return self._engine.sample()

    def next_single(self) -> float:
        return self._single_from(self._engine.sample)

    def next_bytes(self, buffer: Any) -> None:
        self._engine.next_bytes(buffer)

    def fill_bytes(self, buffer: Any) -> None:
        self._engine.next_bytes(buffer)


class OverridableStrategy(_CompatStrategy):
    """Lazily seeded strategy that defers to the front object's primitives.

    The engine is seeded on the first sampling call through a plain presence
    check. Concurrent first use from several threads is not guarded and must be
    serialized by the caller.
    """

    kind = StrategyKind.OVERRIDABLE

    def __init__(self, front: OverridableFront, seed: int) -> None:
        super().__init__(seed)
        self._front = front

    @property
    def initialized(self) -> bool:
        return self._engine.initialized

    def _ensure(self) -> SubtractiveEngine:
        self._engine.ensure_initialized(self.seed)
        return self._engine

    def sample(self) -> float:
        return self._ensure().sample()

    def next(self) -> int:
        return self._ensure().internal_sample()

    def next_max(self, max_value: int) -> int:
        check_non_negative("max_value", max_value)
        self._ensure()
        return int(self._front.sample() * max_value)

    def next_range(self, min_value: int, max_value: int) -> int:
        check_ordered(min_value, max_value)
        engine = self._ensure()
        range_ = max_value - min_value
        if range_ <= INT32_MAX:
            return int(self._front.sample() * range_) + min_value
        return int(engine.get_sample_for_large_range() * range_) + min_value

    def _next_uint64(self) -> int:
        return self._compose_uint64(self._front.next_int)

    def next_int64(self) -> int:
        self._ensure()
        return super().next_int64()

    def next_int64_range(self, min_value: int, max_value: int) -> int:
        check_ordered(min_value, max_value)
        exclusive_range = max_value - min_value
        if exclusive_range > 1:
            self._ensure()
            return self._next_int64_in(min_value, exclusive_range)
        return min_value

    def next_double(self) -> float:
        self._ensure()
        return self._front.sample()

    def next_single(self) -> float:
        self._ensure()
        return self._single_from(self._front.sample)

    def next_bytes(self, buffer: Any) -> None:
        self._ensure().next_bytes(buffer)

    def fill_bytes(self, buffer: Any) -> None:
        self._ensure()
        for i in range(len(buffer)):
            buffer[i] = self._front.next_int() & 0xFF
