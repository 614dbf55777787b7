from __future__ import annotations

# ruff: noqa: E402
import argparse
import json
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import numpy as np

REPO_ROOT = Path(__file__).resolve().parents[1]
PYTHON_ROOT = REPO_ROOT / "python"
if str(PYTHON_ROOT) not in sys.path:
    sys.path.insert(0, str(PYTHON_ROOT))

from compat_random import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, LegacyRandom
from compat_random.trace import JsonlTraceLogger, TraceRecord, run_script

SUITES = ("A", "B", "C")


class PassthroughRandom(LegacyRandom):
    """Subclass without overrides; forces the lazily seeded overridable path."""


@dataclass(frozen=True)
class ParityConfig:
    seeds: int = 10
    seed_start: int = 0
    steps: int = 500
    suites: tuple[str, ...] = SUITES
    bundle_dir: Path = Path("artifacts/parity/mismatch_bundles")
    stop_on_first: bool = False


def generate_script(suite: str, steps: int, seed: int) -> list[tuple[Any, ...]]:
    if suite == "A":
        rng = np.random.default_rng(seed)
        script: list[tuple[Any, ...]] = []
        for kind in rng.integers(0, 8, size=steps):
            kind = int(kind)
            if kind == 0:
                script.append(("next_int",))
            elif kind == 1:
                script.append(("next_int", int(rng.integers(0, 1_000_000))))
            elif kind == 2:
                lo = int(rng.integers(-50_000, 50_000))
                script.append(("next_int", lo, lo + int(rng.integers(0, 100_000))))
            elif kind == 3:
                script.append(("next_int64",))
            elif kind == 4:
                lo = int(rng.integers(-(2**40), 2**40))
                script.append(("next_int64", lo, lo + int(rng.integers(0, 2**41))))
            elif kind == 5:
                script.append(("next_double",))
            elif kind == 6:
                script.append(("next_single",))
            else:
                script.append(("fill_bytes", int(rng.integers(0, 16))))
        return script

    if suite == "B":
        pattern: list[tuple[Any, ...]] = [
            ("next_int", 0),
            ("next_int", 1),
            ("next_int", INT32_MAX),
            ("next_int", INT32_MIN, INT32_MAX),
            ("next_int", -1, INT32_MAX),
            ("next_int", 5, 5),
            ("next_int", 5, 6),
            ("next_bytes", 7),
            ("fill_bytes", 7),
            ("sample",),
            ("next_single",),
            ("next_double",),
        ]
    elif suite == "C":
        pattern = [
            ("next_int64",),
            ("next_int64", 0),
            ("next_int64", 1),
            ("next_int64", 2),
            ("next_int64", 3),
            ("next_int64", INT64_MAX),
            ("next_int64", INT64_MIN, INT64_MAX),
            ("next_int64", -7, 7),
            ("next_int64", 1 << 40, (1 << 40) + 1),
        ]
    else:
        raise ValueError(f"Unsupported suite: {suite}")

    repeats = -(-steps // len(pattern))
    return (pattern * repeats)[:steps]


def compare_traces(
    seeded: list[TraceRecord], overridable: list[TraceRecord]
) -> dict[str, object] | None:
    for left, right in zip(seeded, overridable, strict=True):
        if left.value != right.value:
            return {
                "step": left.index,
                "op": left.op,
                "args": list(left.args),
                "seeded": left.value,
                "overridable": right.value,
            }
    return None


def _write_mismatch_bundle(
    bundle_dir: Path,
    suite: str,
    seed: int,
    script: list[tuple[Any, ...]],
    seeded: list[TraceRecord],
    overridable: list[TraceRecord],
    mismatch: dict[str, object],
) -> Path:
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    case_dir = bundle_dir / f"{timestamp}_suite-{suite}_seed-{seed}"
    case_dir.mkdir(parents=True, exist_ok=True)

    JsonlTraceLogger(path=case_dir / "seeded_trace.jsonl").log_records(seeded)
    JsonlTraceLogger(path=case_dir / "overridable_trace.jsonl").log_records(overridable)

    payload = {
        "suite": suite,
        "seed": int(seed),
        "script": [list(op) for op in script],
        "mismatch": mismatch,
    }
    (case_dir / "mismatch.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return case_dir


def run_parity(cfg: ParityConfig) -> dict[str, Any]:
    cases: list[dict[str, Any]] = []
    pairs = [
        (suite, seed)
        for suite in cfg.suites
        for seed in range(cfg.seed_start, cfg.seed_start + cfg.seeds)
    ]

    for suite, seed in pairs:
        script = generate_script(suite, cfg.steps, seed + 1000)
        seeded = run_script(LegacyRandom(seed), script)
        overridable = run_script(PassthroughRandom(seed), script)

        mismatch = compare_traces(seeded, overridable)
        case: dict[str, Any] = {"suite": suite, "seed": seed, "steps": len(script)}
        if mismatch is None:
            case["pass"] = True
            print(f"PASS suite={suite} seed={seed} steps={len(script)}")
            cases.append(case)
            continue

        bundle_path = _write_mismatch_bundle(
            cfg.bundle_dir, suite, seed, script, seeded, overridable, mismatch
        )
        case.update({"pass": False, "mismatch": mismatch, "bundle": bundle_path.as_posix()})
        cases.append(case)
        print(
            "FAIL "
            f"suite={suite} seed={seed} "
            f"step={mismatch.get('step')} op={mismatch.get('op')} "
            f"bundle={bundle_path}"
        )
        if cfg.stop_on_first:
            break

    failed = sum(1 for case in cases if not case["pass"])
    return {"total_cases": len(cases), "failed_cases": failed, "cases": cases}


def _parse_args() -> tuple[ParityConfig, bool]:
    parser = argparse.ArgumentParser(description="Run seeded-vs-overridable parity harness.")
    parser.add_argument("--seeds", type=int, default=10, help="Number of seeds to run.")
    parser.add_argument("--seed-start", type=int, default=0, help="Initial seed.")
    parser.add_argument("--steps", type=int, default=500, help="Operations per case.")
    parser.add_argument(
        "--suite",
        action="append",
        choices=SUITES,
        help="Operation suites to run (repeat flag for multiple). Defaults to A,B,C.",
    )
    parser.add_argument(
        "--bundle-dir",
        type=Path,
        default=Path("artifacts/parity/mismatch_bundles"),
        help="Mismatch bundle directory.",
    )
    parser.add_argument("--stop-on-first", action="store_true")
    parser.add_argument("--allow-mismatch", action="store_true")
    args = parser.parse_args()

    cfg = ParityConfig(
        seeds=args.seeds,
        seed_start=args.seed_start,
        steps=args.steps,
        suites=tuple(args.suite) if args.suite else SUITES,
        bundle_dir=args.bundle_dir,
        stop_on_first=args.stop_on_first,
    )
    return cfg, bool(args.allow_mismatch)


def main() -> int:
    cfg, allow_mismatch = _parse_args()
    report = run_parity(cfg)
    print(
        f"Completed {report['total_cases']} parity cases. Failed: {report['failed_cases']}."
    )

    if report["failed_cases"] > 0 and not allow_mismatch:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
