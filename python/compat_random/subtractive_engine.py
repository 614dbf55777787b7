"""Modified Knuth subtractive generator backing every compatibility strategy."""

from __future__ import annotations

from typing import Any

from .constants import (
    INEXTP_START,
    INIT_STRIDE,
    INT32_MAX,
    INT32_MIN,
    MIX_OFFSET,
    MIX_PASSES,
    MSEED,
    SEED_ARRAY_LENGTH,
)

_MASK32 = (1 << 32) - 1
_SIGN32 = 1 << 31

_SAMPLE_SCALE = 1.0 / INT32_MAX
_LARGE_RANGE_OFFSET = float(INT32_MAX - 1)
_LARGE_RANGE_DIVISOR = float(2 * INT32_MAX - 1)


def _wrap_int32(value: int) -> int:
    return ((value + _SIGN32) & _MASK32) - _SIGN32


class SubtractiveEngine:
    """Subtractive generator state with a 56-slot array and two cursors.

    The state stays empty until ``initialize`` (or ``ensure_initialized``) runs,
    after which it is never reset. Every draw mutates the state, so a single
    engine must not be shared between threads without external locking.
    """

    def __init__(self) -> None:
        self._seed_array: list[int] | None = None
        self._inext = 0
        self._inextp = INEXTP_START

    @property
    def initialized(self) -> bool:
        return self._seed_array is not None

    def ensure_initialized(self, seed: int) -> None:
        if self._seed_array is None:
            self.initialize(seed)

    def initialize(self, seed: int) -> None:
        if self._seed_array is not None:
            raise RuntimeError("subtractive engine is already initialized")

        seed_array = [0] * SEED_ARRAY_LENGTH

        subtraction = INT32_MAX if seed == INT32_MIN else abs(seed)
        mj = MSEED - subtraction
        seed_array[55] = mj
        mk = 1

        # Index 0 is never used; Knuth's algorithm works over 1..55.
        ii = 0
        for _ in range(1, 55):
            ii += INIT_STRIDE
            if ii >= 55:
                ii -= 55

            seed_array[ii] = mk
            mk = _wrap_int32(mj - mk)
            if mk < 0:
                mk = _wrap_int32(mk + INT32_MAX)
            mj = seed_array[ii]

        for _ in range(MIX_PASSES):
            for i in range(1, SEED_ARRAY_LENGTH):
                n = i + MIX_OFFSET
                if n >= 55:
                    n -= 55

                value = _wrap_int32(seed_array[i] - seed_array[1 + n])
                if value < 0:
                    value = _wrap_int32(value + INT32_MAX)
                seed_array[i] = value

        self._seed_array = seed_array
        self._inext = 0
        self._inextp = INEXTP_START

    def _require_state(self) -> list[int]:
        if self._seed_array is None:
            raise RuntimeError("subtractive engine used before initialization")
        return self._seed_array

    def internal_sample(self) -> int:
        seed_array = self._require_state()

        inext = self._inext + 1
        if inext >= SEED_ARRAY_LENGTH:
            inext = 1

        inextp = self._inextp + 1
        if inextp >= SEED_ARRAY_LENGTH:
            inextp = 1

        ret_val = _wrap_int32(seed_array[inext] - seed_array[inextp])
        if ret_val == INT32_MAX:
            ret_val -= 1
        if ret_val < 0:
            ret_val = _wrap_int32(ret_val + INT32_MAX)

        seed_array[inext] = ret_val
        self._inext = inext
        self._inextp = inextp
        return ret_val

    def sample(self) -> float:
        return self.internal_sample() * _SAMPLE_SCALE

    def get_sample_for_large_range(self) -> float:
        # sample() only has 31 bits of resolution, so scaling it across the full
        # 32-bit range would only ever produce even integers.
        result = self.internal_sample()

        # The second draw only decides the sign.
        if self.internal_sample() % 2 == 0:
            result = -result

        d = float(result)
        d += _LARGE_RANGE_OFFSET
        d /= _LARGE_RANGE_DIVISOR
        return d

    def next_bytes(self, buffer: Any) -> None:
        for i in range(len(buffer)):
            buffer[i] = self.internal_sample() & 0xFF

    def snapshot(self) -> dict[str, Any]:
        seed_array = self._require_state()
        return {
            "seed_array": list(seed_array),
            "inext": self._inext,
            "inextp": self._inextp,
        }
