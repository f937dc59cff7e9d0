"""Catalogue of named objective and constraint terms."""

from .constraints import CONSTRAINTS
from .objectives import OBJECTIVES

__all__ = ["OBJECTIVES", "CONSTRAINTS"]
