"""Constraint terms: signed residuals c(x), satisfied when c(x) <= 0.

The driver penalizes each residual as max(c, 0)^2, so implementations return
the raw residual and never clip it themselves.
"""

from __future__ import annotations

from typing import Any

from ep_core.registry import TermRegistry

__all__ = ["CONSTRAINTS"]

CONSTRAINTS = TermRegistry("constraint")


@CONSTRAINTS.register("lessThan")
def less_than(a: Any, b: Any, padding: float = 0.0) -> Any:
    """a + padding <= b"""
    return a - b + padding


@CONSTRAINTS.register("greaterThan")
def greater_than(a: Any, b: Any, padding: float = 0.0) -> Any:
    """a >= b + padding"""
    return b - a + padding


@CONSTRAINTS.register("withinDist")
def within_dist(ax: Any, ay: Any, bx: Any, by: Any, d: Any) -> Any:
    """Point a lies within distance d of point b (compared squared)."""
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy - d * d


@CONSTRAINTS.register("apartBy")
def apart_by(ax: Any, ay: Any, bx: Any, by: Any, d: Any) -> Any:
    """Points a and b are at least d apart (compared squared)."""
    dx = ax - bx
    dy = ay - by
    return d * d - (dx * dx + dy * dy)
