import json
from pathlib import Path

import numpy as np
import pytest
from compat_random import LegacyRandom
from compat_random.trace import (
    JsonlTraceLogger,
    append_jsonl,
    apply_operation,
    parse_operation,
    run_script,
)


def test_run_script_records_each_operation() -> None:
    records = run_script(
        LegacyRandom(42),
        [("next_int",), ("next_int", 100), ("fill_bytes", 3), ("next_int64", 5, 5)],
    )

    assert [record.index for record in records] == [0, 1, 2, 3]
    assert records[0].value == 1434747710
    assert records[1].op == "next_int"
    assert records[1].args == (100,)
    assert records[2].value == [186, 150, 174]
    assert records[3].value == 5
    assert records[3].to_dict() == {"index": 3, "op": "next_int64", "args": [5, 5], "value": 5}


def test_apply_operation_returns_buffer_contents_as_list() -> None:
    assert apply_operation(LegacyRandom(42), ("next_bytes", 4)) == [62, 23, 186, 150]


@pytest.mark.parametrize(
    "op",
    [
        (),
        ("shuffle",),
        ("next_bytes",),
        ("fill_bytes", -1),
        ("next_double", 3),
        ("next_int", 1, 2, 3),
    ],
)
def test_parse_operation_rejects_malformed_ops(op: tuple) -> None:
    with pytest.raises(ValueError):
        parse_operation(op)


@pytest.mark.parametrize("op", [("next_int", 2.9), ("next_int64", 1.0, 5), ("fill_bytes", 3.5)])
def test_parse_operation_rejects_non_integer_args(op: tuple) -> None:
    with pytest.raises(TypeError):
        parse_operation(op)


def test_parse_operation_accepts_numpy_integers() -> None:
    assert parse_operation(("next_int", np.int64(3), np.int32(9))) == ("next_int", (3, 9))


def test_jsonl_logger_appends_rows(tmp_path: Path) -> None:
    path = tmp_path / "traces" / "trace.jsonl"
    records = run_script(LegacyRandom(1), [("next_int", 10), ("next_double",)])

    logger = JsonlTraceLogger(path=path)
    logger.log_records(records, seed=1)
    append_jsonl(path, {"done": True})

    rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(rows) == 3
    assert rows[0]["seed"] == 1
    assert rows[0]["op"] == "next_int"
    assert rows[1]["op"] == "next_double"
    assert rows[2] == {"done": True}
