from __future__ import annotations

import polars as pl

from experiments.plots.plot_penalty_trace import round_boundaries


def test_round_boundaries_mark_outer_round_changes():
    df = pl.DataFrame(
        {
            "call": [1, 2, 3, 4, 5, 6],
            "outer_round": [0, 0, 0, 1, 1, 2],
            "energy": [4.0, 1.0, 0.5, 0.4, 0.4, 0.4],
        }
    )
    assert round_boundaries(df) == [3, 5]


def test_round_boundaries_empty_or_missing_column():
    assert round_boundaries(pl.DataFrame({"call": [1, 2]})) == []
    assert round_boundaries(pl.DataFrame({"outer_round": []}, schema={"outer_round": pl.Int64})) == []
    assert round_boundaries(pl.DataFrame({"outer_round": [0, 0, 0]})) == []
