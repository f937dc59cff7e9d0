"""Objective terms: smooth energies summed unweighted into the total.

Every implementation is plain arithmetic on its arguments so it differentiates
under any gradient backend (numpy scalars, JAX tracers, torch tensors).
"""

from __future__ import annotations

from typing import Any

from ep_core.registry import TermRegistry

__all__ = ["OBJECTIVES"]

OBJECTIVES = TermRegistry("objective")


@OBJECTIVES.register("equal")
def equal(a: Any, b: Any) -> Any:
    """(a - b)^2"""
    diff = a - b
    return diff * diff


@OBJECTIVES.register("squared")
def squared(a: Any) -> Any:
    return a * a


@OBJECTIVES.register("minimize")
def minimize(a: Any) -> Any:
    return a


@OBJECTIVES.register("maximize")
def maximize(a: Any) -> Any:
    return -a


@OBJECTIVES.register("near")
def near(ax: Any, ay: Any, bx: Any, by: Any) -> Any:
    """Squared distance between two points; pulls them together."""
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy
