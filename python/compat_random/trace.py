"""Operation scripts and JSONL traces for comparing generator output."""

from __future__ import annotations

import json
import operator
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .legacy_random import LegacyRandom

SCALAR_OPERATIONS = (
    "sample",
    "next_int",
    "next_int64",
    "next_double",
    "next_single",
)
BUFFER_OPERATIONS = ("next_bytes", "fill_bytes")
OPERATIONS = SCALAR_OPERATIONS + BUFFER_OPERATIONS

Operation = tuple[Any, ...]


@dataclass(frozen=True)
class TraceRecord:
    index: int
    op: str
    args: tuple[int, ...]
    value: int | float | list[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "op": self.op,
            "args": list(self.args),
            "value": self.value,
        }


def parse_operation(op: Sequence[Any]) -> tuple[str, tuple[int, ...]]:
    if len(op) == 0:
        raise ValueError("operation must name a method")

    name = str(op[0])
    if name not in OPERATIONS:
        raise ValueError(f"unsupported operation: {name!r}")

    args = tuple(operator.index(arg) for arg in op[1:])
    if name in BUFFER_OPERATIONS:
        if len(args) != 1 or args[0] < 0:
            raise ValueError(f"{name} takes a single non-negative buffer length")
    elif name in ("next_int", "next_int64"):
        if len(args) > 2:
            raise ValueError(f"{name} takes at most two arguments")
    elif args:
        raise ValueError(f"{name} takes no arguments")
    return name, args


def apply_operation(rng: LegacyRandom, op: Sequence[Any]) -> int | float | list[int]:
    name, args = parse_operation(op)

    if name in BUFFER_OPERATIONS:
        buffer = bytearray(args[0])
        getattr(rng, name)(buffer)
        return list(buffer)

    return getattr(rng, name)(*args)


def run_script(rng: LegacyRandom, script: Iterable[Sequence[Any]]) -> list[TraceRecord]:
    records: list[TraceRecord] = []
    for index, op in enumerate(script):
        name, args = parse_operation(op)
        records.append(
            TraceRecord(index=index, op=name, args=args, value=apply_operation(rng, op))
        )
    return records


def append_jsonl(path: Path, row: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(row, separators=(",", ":")))
        handle.write("\n")


class JsonlTraceLogger:
    def __init__(self, *, path: Path) -> None:
        self.path = path

    def log_row(self, payload: dict[str, Any]) -> None:
        append_jsonl(self.path, payload)

    def log_records(self, records: Iterable[TraceRecord], **context: Any) -> None:
        for record in records:
            self.log_row({**context, **record.to_dict()})
