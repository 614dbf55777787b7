from __future__ import annotations

import os

from .app import DEFAULT_MAX_GENERATORS, create_app


def _parse_csv_env(name: str) -> list[str] | None:
    raw = os.environ.get(name)
    if raw is None:
        return None

    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values


MAX_GENERATORS = int(os.environ.get("CRNG_MAX_GENERATORS", str(DEFAULT_MAX_GENERATORS)))
CORS_ORIGINS = _parse_csv_env("CRNG_CORS_ORIGINS")

app = create_app(
    max_generators=MAX_GENERATORS,
    cors_allow_origins=CORS_ORIGINS,
)
