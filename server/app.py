from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)
DEFAULT_MAX_GENERATORS = 256
MAX_DRAWS_PER_REQUEST = 10_000
MAX_BUFFER_BYTES = 4096


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _ensure_python_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    python_src = repo_root / "python"
    if str(python_src) not in sys.path:
        sys.path.insert(0, str(python_src))


_ensure_python_src_on_path()

from compat_random import LegacyRandom, StrategyKind  # noqa: E402
from compat_random.trace import (  # noqa: E402
    BUFFER_OPERATIONS,
    OPERATIONS,
    apply_operation,
    parse_operation,
)


class _OverridableRandom(LegacyRandom):
    """Subclass without overrides, so sessions can exercise the lazy strategy."""


class CreateGeneratorRequest(BaseModel):
    seed: int | None = Field(default=None, ge=-(2**31), le=2**31 - 1)
    variant: Literal["seeded", "overridable"] = "seeded"


class DrawRequest(BaseModel):
    op: str
    args: list[int] = Field(default_factory=list)
    count: int = Field(default=1, ge=1, le=MAX_DRAWS_PER_REQUEST)


@dataclass
class _GeneratorSession:
    rng: LegacyRandom
    lock: threading.Lock
    draws: int
    created_at: str
    updated_at: str


def _session_payload(generator_id: str, session: _GeneratorSession) -> dict[str, Any]:
    return {
        "generator_id": generator_id,
        "seed": session.rng.seed,
        "variant": session.rng.strategy_kind.value,
        "draws": session.draws,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
    }


class _GeneratorStore:
    """Holds generator sessions; each generator is only touched under its own lock."""

    def __init__(self, *, max_generators: int) -> None:
        self._lock = threading.Lock()
        self._max_generators = int(max_generators)
        self._sessions: dict[str, _GeneratorSession] = {}

    def create(self, *, seed: int | None, variant: str) -> tuple[str, _GeneratorSession]:
        if variant == StrategyKind.SEEDED.value:
            rng = LegacyRandom(seed)
        else:
            rng = _OverridableRandom(seed)

        created_at = now_iso()
        session = _GeneratorSession(
            rng=rng,
            lock=threading.Lock(),
            draws=0,
            created_at=created_at,
            updated_at=created_at,
        )
        generator_id = uuid4().hex

        with self._lock:
            if len(self._sessions) >= self._max_generators:
                raise HTTPException(
                    status_code=429,
                    detail=f"generator limit reached ({self._max_generators})",
                )
            self._sessions[generator_id] = session

        return generator_id, session

    def get(self, generator_id: str) -> _GeneratorSession:
        with self._lock:
            session = self._sessions.get(generator_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"generator_id not found: {generator_id}")
        return session

    def items(self) -> list[tuple[str, _GeneratorSession]]:
        with self._lock:
            return list(self._sessions.items())

    def draw(
        self, *, generator_id: str, op: tuple[Any, ...], count: int
    ) -> tuple[list[Any], _GeneratorSession]:
        try:
            name, args = parse_operation(op)
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        if name in BUFFER_OPERATIONS and args[0] > MAX_BUFFER_BYTES:
            raise HTTPException(
                status_code=422,
                detail=f"{name} buffer length exceeds {MAX_BUFFER_BYTES} bytes",
            )

        session = self.get(generator_id)
        with session.lock:
            try:
                values = [apply_operation(session.rng, op) for _ in range(count)]
            except (TypeError, ValueError) as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
            session.draws += count
            session.updated_at = now_iso()
        return values, session

    def delete(self, *, generator_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(generator_id, None)
        if session is None:
            raise HTTPException(status_code=404, detail=f"generator_id not found: {generator_id}")


def create_app(
    *,
    max_generators: int = DEFAULT_MAX_GENERATORS,
    cors_allow_origins: list[str] | None = None,
) -> FastAPI:
    app = FastAPI(title="Compat Random API", version="0.1.0")
    app.state.generators = _GeneratorStore(max_generators=max_generators)

    origins = (
        list(cors_allow_origins) if cors_allow_origins is not None else list(DEFAULT_CORS_ORIGINS)
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/operations")
    def list_operations() -> dict[str, Any]:
        return {"operations": list(OPERATIONS)}

    @app.post("/api/generators")
    def create_generator(request: CreateGeneratorRequest) -> dict[str, Any]:
        generator_id, session = app.state.generators.create(
            seed=request.seed, variant=request.variant
        )
        return _session_payload(generator_id, session)

    @app.get("/api/generators")
    def list_generators(limit: int = Query(default=50, ge=1, le=500)) -> dict[str, Any]:
        items = app.state.generators.items()
        items.sort(key=lambda item: item[1].created_at, reverse=True)
        generators = [_session_payload(gid, session) for gid, session in items[:limit]]
        return {"generators": generators, "count": len(generators), "total": len(items)}

    @app.get("/api/generators/{generator_id}")
    def get_generator(generator_id: str) -> dict[str, Any]:
        session = app.state.generators.get(generator_id)
        return _session_payload(generator_id, session)

    @app.post("/api/generators/{generator_id}/draw")
    def draw(generator_id: str, request: DrawRequest) -> dict[str, Any]:
        values, session = app.state.generators.draw(
            generator_id=generator_id,
            op=(request.op, *request.args),
            count=request.count,
        )
        return {
            **_session_payload(generator_id, session),
            "op": request.op,
            "args": list(request.args),
            "count": len(values),
            "values": values,
        }

    @app.delete("/api/generators/{generator_id}")
    def delete_generator(generator_id: str) -> dict[str, Any]:
        app.state.generators.delete(generator_id=generator_id)
        return {
            "generator_id": generator_id,
            "deleted": True,
        }

    return app
