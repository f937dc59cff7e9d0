"""Interfaces for the collaborators the optimizer core consumes.

Exposes typed Protocols for the translation layer, gradient backends and term
implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .state import OptimizationState
    from .translation import Path, ResolvedTerm, TermCall

__all__ = [
    "TermFn",
    "ScalarFn",
    "TranslationLayer",
    "GradientBackend",
]

# A term implementation: numeric (possibly gradient-tracked) arguments -> scalar
TermFn = Callable[..., Any]
# A scalar function of the free-variable vector
ScalarFn = Callable[[Any], Any]


@runtime_checkable
class TranslationLayer(Protocol):
    """Symbolic layer that owns the problem representation."""

    def evaluate_terms(
        self,
        terms: Sequence["TermCall"],
        translation: Any,
        paths: Sequence["Path"],
    ) -> List["ResolvedTerm"]:
        """Resolve named calls into argument readers over the variable vector."""
        ...

    def write_back(self, translation: Any, pairs: Sequence[Tuple["Path", float]]) -> Any:
        """Persist solved variable values at their paths; returns the updated translation."""
        ...

    def recompute(self, state: "OptimizationState") -> "OptimizationState":
        """Derive dependent values from the freshly written translation."""
        ...


@runtime_checkable
class GradientBackend(Protocol):
    """Supplies value and gradient of a scalar function of a vector."""

    name: str

    def value_and_grad(self, fn: ScalarFn, xs: np.ndarray) -> Tuple[float, np.ndarray]:
        ...

    def penalty(self, c: Any) -> Any:
        """One-sided quadratic penalty max(c, 0)^2 in the backend's array type."""
        ...
