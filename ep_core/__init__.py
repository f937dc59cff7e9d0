"""Core package for the incremental exterior-penalty optimizer."""

from .config import OptimizerConfig, StepPolicy
from .driver import PenaltyOptimizer
from .errors import NonFiniteEnergyError, OptimizerError, TermNotFoundError
from .registry import TermRegistry
from .state import OptimizationState, OptimizationStatus
from .translation import DictTranslationLayer, TermCall, VarRef

__all__ = [
    "OptimizerConfig",
    "StepPolicy",
    "PenaltyOptimizer",
    "OptimizerError",
    "TermNotFoundError",
    "NonFiniteEnergyError",
    "TermRegistry",
    "OptimizationState",
    "OptimizationStatus",
    "DictTranslationLayer",
    "TermCall",
    "VarRef",
]
