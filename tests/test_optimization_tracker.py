from __future__ import annotations

import math

import pytest

from ep_core.config import OptimizerConfig
from ep_core.driver import PenaltyOptimizer
from ep_core.state import OptimizationState
from ep_core.translation import DictTranslationLayer, TermCall, VarRef
from ep_logging.metrics_log import log_record, log_records, read_log
from ep_logging.observability import BatchTracker, OptimizationTracker
from ep_terms import CONSTRAINTS, OBJECTIVES

X = ("x", "value")


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("EP_LOG_DIR", str(tmp_path))
    return tmp_path


def _bound_run(*trackers):
    opt = PenaltyOptimizer(
        layer=DictTranslationLayer(),
        objectives=OBJECTIVES,
        constraints=CONSTRAINTS,
        config=OptimizerConfig(step_policy="fixed", step_size=1e-4),
    )
    for tracker in trackers:
        tracker.attach(opt)
    state = OptimizationState.initial(
        paths=[X],
        values=[10.0],
        constraint_terms=[TermCall("lessThan", (VarRef(X), 5.0))],
    )
    return opt.solve(state, steps_per_call=50, max_calls=200)


def test_tracker_logs_one_row_per_advance(log_dir):
    tracker = OptimizationTracker(name="trace", run_id="t1", log_per_variable=True)
    final = _bound_run(tracker)
    rows = list(tracker.buffer)
    assert final.is_converged
    assert len(rows) == tracker.call
    assert rows[0]["status"] == "Minimizing" and rows[0]["iterations"] == 0
    assert rows[1]["iterations"] == 50
    assert rows[0]["max_violation"] == pytest.approx(5.0)
    assert rows[-1]["status"] == "GloballyConverged"
    assert rows[-1]["x:x.value"] == pytest.approx(final.free_variable_values[0])
    assert all(not math.isnan(r["energy:penalty"]) for r in rows)

    tracker.flush()
    assert tracker.buffer == []
    df = read_log("trace")
    assert df.height == len(rows)
    assert set(df.get_column("run_id").to_list()) == {"t1"}
    assert (log_dir / "trace.csv").exists()


def test_batch_tracker_records_step_statistics(log_dir):
    batches = BatchTracker(name="batches", run_id="b1")
    _bound_run(batches)
    assert batches.batch == len(batches.buffer) > 0
    first = batches.buffer[0]
    assert first["iterations"] == 50
    assert first["min_step_length"] == first["max_step_length"] == pytest.approx(1e-4)
    batches.flush()
    assert read_log("batches").height == batches.batch


def test_log_records_appends_with_union_of_columns(log_dir):
    log_record("mixed", {"a": 1, "b": 2.0})
    log_records("mixed", [{"a": 3, "c": "x"}])
    df = read_log("mixed")
    assert df.height == 2
    assert set(df.columns) == {"a", "b", "c"}
    assert df.get_column("a").to_list() == [1, 3]
