import json
from pathlib import Path

import pytest
from compat_random.trace import TraceRecord

from tools.run_parity import ParityConfig, compare_traces, generate_script, run_parity


def test_parity_harness_passes_for_all_suites(tmp_path: Path) -> None:
    report = run_parity(
        ParityConfig(seeds=2, seed_start=40, steps=120, bundle_dir=tmp_path / "bundles")
    )

    assert report["total_cases"] == 6
    assert report["failed_cases"] == 0
    assert {case["suite"] for case in report["cases"]} == {"A", "B", "C"}
    assert not (tmp_path / "bundles").exists()


def test_generate_script_is_deterministic_and_sized() -> None:
    assert generate_script("A", 50, 7) == generate_script("A", 50, 7)
    for suite in ("A", "B", "C"):
        assert len(generate_script(suite, 33, 1)) == 33


def test_generate_script_rejects_unknown_suite() -> None:
    with pytest.raises(ValueError, match="Unsupported suite"):
        generate_script("Z", 10, 0)


def test_compare_traces_reports_first_mismatch() -> None:
    seeded = [
        TraceRecord(index=0, op="next_int", args=(), value=1),
        TraceRecord(index=1, op="next_int", args=(10,), value=2),
    ]
    overridable = [
        TraceRecord(index=0, op="next_int", args=(), value=1),
        TraceRecord(index=1, op="next_int", args=(10,), value=3),
    ]

    mismatch = compare_traces(seeded, overridable)
    assert mismatch == {
        "step": 1,
        "op": "next_int",
        "args": [10],
        "seeded": 2,
        "overridable": 3,
    }
    assert compare_traces(seeded, seeded) is None


def test_mismatch_bundle_is_written(tmp_path: Path, monkeypatch) -> None:
    import tools.run_parity as run_parity_module

    class DriftingRandom(run_parity_module.LegacyRandom):
        def sample(self) -> float:
            return 0.0

    monkeypatch.setattr(run_parity_module, "PassthroughRandom", DriftingRandom)
    report = run_parity(
        ParityConfig(
            seeds=1,
            steps=12,
            suites=("B",),
            bundle_dir=tmp_path / "bundles",
            stop_on_first=True,
        )
    )

    assert report["failed_cases"] == 1
    bundle = Path(report["cases"][0]["bundle"])
    payload = json.loads((bundle / "mismatch.json").read_text(encoding="utf-8"))
    assert payload["suite"] == "B"
    assert payload["mismatch"]["step"] == 2
    assert (bundle / "seeded_trace.jsonl").exists()
    assert (bundle / "overridable_trace.jsonl").exists()
