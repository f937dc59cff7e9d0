from __future__ import annotations

import pytest

from ep_core.errors import OptimizerError, TermNotFoundError
from ep_core.registry import TermRegistry
from ep_terms import CONSTRAINTS, OBJECTIVES


def test_register_and_dispatch():
    reg = TermRegistry("objective")

    @reg.register("double")
    def double(a):
        return 2 * a

    assert "double" in reg
    assert reg.get("double") is double
    assert reg.dispatch("double", 4.0) == 8.0
    assert reg.names() == ["double"]
    assert len(reg) == 1


def test_missing_name_raises_term_not_found():
    reg = TermRegistry("constraint")
    with pytest.raises(TermNotFoundError) as info:
        reg.get("atDist")
    err = info.value
    assert isinstance(err, OptimizerError)
    assert isinstance(err, KeyError)
    assert "atDist" in str(err) and "constraint" in str(err)


def test_duplicate_registration_rejected():
    reg = TermRegistry("objective", {"f": lambda a: a})
    with pytest.raises(ValueError):
        reg.add("f", lambda a: -a)


def test_merged_registry_keeps_both_tables():
    extra = TermRegistry("objective", {"cube": lambda a: a * a * a})
    merged = OBJECTIVES.merged(extra)
    assert "cube" in merged and "equal" in merged
    assert "cube" not in OBJECTIVES
    with pytest.raises(ValueError):
        merged.merged(extra)


def test_catalogue_semantics():
    assert OBJECTIVES.dispatch("equal", 3.0, 1.0) == pytest.approx(4.0)
    assert OBJECTIVES.dispatch("near", 0.0, 0.0, 3.0, 4.0) == pytest.approx(25.0)
    assert OBJECTIVES.dispatch("maximize", 2.0) == pytest.approx(-2.0)
    # constraints are satisfied when the residual is <= 0
    assert CONSTRAINTS.dispatch("lessThan", 3.0, 5.0) < 0.0
    assert CONSTRAINTS.dispatch("lessThan", 3.0, 5.0, 3.0) > 0.0
    assert CONSTRAINTS.dispatch("greaterThan", 3.0, 5.0) > 0.0
    assert CONSTRAINTS.dispatch("withinDist", 0.0, 0.0, 1.0, 0.0, 2.0) < 0.0
    assert CONSTRAINTS.dispatch("apartBy", 0.0, 0.0, 1.0, 0.0, 2.0) > 0.0
