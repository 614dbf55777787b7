from __future__ import annotations

# ruff: noqa: E402
import argparse
import json
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[1]
PYTHON_ROOT = REPO_ROOT / "python"
if str(PYTHON_ROOT) not in sys.path:
    sys.path.insert(0, str(PYTHON_ROOT))

from compat_random import LegacyRandom
from compat_random.trace import run_script

GOLDEN_SCHEMA_VERSION = 1

GOLDEN_SCRIPTS: dict[str, tuple[Any, ...]] = {
    "next_int": ("next_int",),
    "next_int_100": ("next_int", 100),
    "next_int_neg10_10": ("next_int", -10, 10),
    "next_int_full_range": ("next_int", -(2**31), 2**31 - 1),
    "next_int64": ("next_int64",),
    "next_int64_1000": ("next_int64", 1000),
    "next_double": ("next_double",),
    "next_single": ("next_single",),
}


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class GoldenConfig:
    seeds: tuple[int, ...] = (0, 1, 42, -42, -(2**31), 2**31 - 1)
    count: int = 5
    byte_count: int = 8
    output_path: Path | None = None


def golden_vectors_for_seed(seed: int, *, count: int, byte_count: int) -> dict[str, Any]:
    vectors: dict[str, Any] = {}
    for name, op in GOLDEN_SCRIPTS.items():
        records = run_script(LegacyRandom(seed), [op] * count)
        vectors[name] = [record.value for record in records]

    (record,) = run_script(LegacyRandom(seed), [("next_bytes", byte_count)])
    vectors["next_bytes"] = record.value
    return vectors


def generate_golden(cfg: GoldenConfig) -> dict[str, Any]:
    report: dict[str, Any] = {
        "schema_version": GOLDEN_SCHEMA_VERSION,
        "generated_at": now_iso(),
        "count": int(cfg.count),
        "byte_count": int(cfg.byte_count),
        "seeds": {
            str(seed): golden_vectors_for_seed(
                int(seed), count=int(cfg.count), byte_count=int(cfg.byte_count)
            )
            for seed in cfg.seeds
        },
    }

    if cfg.output_path is not None:
        cfg.output_path.parent.mkdir(parents=True, exist_ok=True)
        cfg.output_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    return report


def _parse_args() -> GoldenConfig:
    parser = argparse.ArgumentParser(description="Generate pinned golden vectors.")
    parser.add_argument(
        "--seed",
        type=lambda value: int(value, 0),
        action="append",
        help="Seed to include (decimal or 0x-prefixed hex); repeat for multiple.",
    )
    parser.add_argument("--count", type=int, default=5, help="Draws per operation.")
    parser.add_argument("--byte-count", type=int, default=8)
    parser.add_argument("--output-path", type=Path, default=None)
    args = parser.parse_args()

    defaults = GoldenConfig()
    return GoldenConfig(
        seeds=tuple(args.seed) if args.seed else defaults.seeds,
        count=args.count,
        byte_count=args.byte_count,
        output_path=args.output_path,
    )


def main() -> int:
    cfg = _parse_args()
    report = generate_golden(cfg)
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
