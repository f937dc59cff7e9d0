"""Term calls, argument resolution and an in-memory translation layer.

A problem is stated as named calls whose arguments are either literals or
references to properties of the translation:

    TermCall("lessThan", (VarRef(("A", "shape", "x")), 5.0))

Free variables are the properties listed in ``OptimizationState.free_variable_paths``.
Resolution turns each call into a ``ResolvedTerm`` that reads its variable
arguments straight out of the optimizer's variable vector, so the symbolic
lookup happens once per energy rebuild rather than once per evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .state import OptimizationState

__all__ = [
    "Path",
    "VarRef",
    "TermCall",
    "ResolvedTerm",
    "DictTranslationLayer",
    "format_path",
    "describe_term",
    "describe_terms",
]

Path = Tuple[str, ...]
DerivedFn = Callable[[Mapping[Path, float]], float]


@dataclass(frozen=True)
class VarRef:
    """Reference to a translation property, e.g. ``VarRef(("A", "shape", "x"))``."""

    path: Path

    def __post_init__(self) -> None:
        assert isinstance(self.path, tuple) and len(self.path) > 0, "path must be a non-empty tuple"


@dataclass(frozen=True)
class TermCall:
    """A named objective/constraint call as produced by the translation layer."""

    name: str
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class ResolvedTerm:
    """A term call whose arguments are bound to variable slots or constants.

    ``slots[k]`` is the variable index feeding argument ``k``, or ``None`` when
    the argument is the constant ``constants[k]``.
    """

    name: str
    slots: Tuple[Optional[int], ...]
    constants: Tuple[Any, ...]

    def arguments(self, xs: Any) -> List[Any]:
        return [xs[idx] if idx is not None else const for idx, const in zip(self.slots, self.constants)]

    @property
    def variable_indices(self) -> Tuple[int, ...]:
        return tuple(idx for idx in self.slots if idx is not None)


def format_path(path: Path) -> str:
    return ".".join(str(p) for p in path)


def _describe_arg(arg: Any) -> str:
    if isinstance(arg, VarRef):
        return format_path(arg.path)
    return repr(arg)


def describe_term(term: TermCall) -> str:
    """Pretty-print a call as ``name(A.shape.x, 5.0)``."""
    return f"{term.name}({', '.join(_describe_arg(a) for a in term.args)})"


def describe_terms(terms: Sequence[TermCall]) -> List[str]:
    return [describe_term(t) for t in terms]


@dataclass
class DictTranslationLayer:
    """Translation held as a flat ``{path: value}`` mapping.

    ``derived`` maps a path to a function of the whole translation; those
    values are refreshed by ``recompute`` after every write-back, in insertion
    order, so a derived value may read earlier derived values.
    """

    derived: Mapping[Path, DerivedFn] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for path, fn in self.derived.items():
            assert isinstance(path, tuple) and len(path) > 0, "derived path must be a non-empty tuple"
            assert callable(fn), f"derived value for {format_path(path)} must be callable"

    def evaluate_terms(
        self,
        terms: Sequence[TermCall],
        translation: Mapping[Path, float],
        paths: Sequence[Path],
    ) -> List[ResolvedTerm]:
        index: Dict[Path, int] = {tuple(p): i for i, p in enumerate(paths)}
        resolved: List[ResolvedTerm] = []
        for term in terms:
            slots: List[Optional[int]] = []
            constants: List[Any] = []
            for arg in term.args:
                if isinstance(arg, VarRef):
                    if arg.path in index:
                        slots.append(index[arg.path])
                        constants.append(None)
                        continue
                    if arg.path not in translation:
                        raise KeyError(
                            f"{describe_term(term)}: path {format_path(arg.path)} not found in translation"
                        )
                    slots.append(None)
                    constants.append(float(translation[arg.path]))
                else:
                    slots.append(None)
                    constants.append(arg)
            resolved.append(ResolvedTerm(term.name, tuple(slots), tuple(constants)))
        return resolved

    def write_back(
        self,
        translation: Mapping[Path, float],
        pairs: Sequence[Tuple[Path, float]],
    ) -> Dict[Path, float]:
        updated: Dict[Path, float] = dict(translation)
        for path, value in pairs:
            updated[tuple(path)] = float(value)
        return updated

    def recompute(self, state: "OptimizationState") -> "OptimizationState":
        if not self.derived:
            return state
        updated: Dict[Path, float] = dict(state.translation)
        for path, fn in self.derived.items():
            updated[path] = float(fn(updated))
        return replace(state, translation=updated)
