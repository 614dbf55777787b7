"""Process-wide seed source for generators constructed without a seed."""

from __future__ import annotations

import random
import threading

from .constants import INT32_MAX

_lock = threading.Lock()
_source: random.Random = random.SystemRandom()


def shared_seed() -> int:
    """Return a seed in ``[0, INT32_MAX)``."""

    with _lock:
        return _source.randrange(0, INT32_MAX)


def set_shared_source(source: random.Random) -> random.Random:
    """Swap the shared source, returning the previous one. Intended for tests."""

    global _source
    with _lock:
        previous = _source
        _source = source
    return previous
