"""Legacy-compatible subtractive random number generator."""

from .constants import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN
from .errors import ArgumentOutOfRangeError
from .legacy_random import LegacyRandom, select_strategy
from .shared import shared_seed
from .strategies import OverridableStrategy, SeededStrategy, StrategyKind
from .subtractive_engine import SubtractiveEngine

__all__ = [
    "ArgumentOutOfRangeError",
    "LegacyRandom",
    "OverridableStrategy",
    "SeededStrategy",
    "StrategyKind",
    "SubtractiveEngine",
    "select_strategy",
    "shared_seed",
    "INT32_MAX",
    "INT32_MIN",
    "INT64_MAX",
    "INT64_MIN",
]
