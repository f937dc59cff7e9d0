"""Error taxonomy for the optimizer core."""

from __future__ import annotations

__all__ = ["OptimizerError", "TermNotFoundError", "NonFiniteEnergyError"]


class OptimizerError(RuntimeError):
    """Base class for fatal optimizer errors."""


class TermNotFoundError(OptimizerError, KeyError):
    """An objective/constraint name is missing from its registry.

    This is a configuration error: the problem definition references a term
    that has no implementation, so the energy cannot be built.
    """

    def __init__(self, name: str, kind: str = "term") -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"{kind} {name!r} not found in registry")

    def __str__(self) -> str:
        return str(self.args[0])


class NonFiniteEnergyError(OptimizerError, FloatingPointError):
    """Energy or gradient became NaN/inf during minimization."""
