"""Name → implementation tables for objective and constraint terms."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Mapping, Optional

from .errors import TermNotFoundError
from .interfaces import TermFn

__all__ = ["TermRegistry"]


class TermRegistry:
    """Closed, enumerable set of term implementations keyed by name.

    Usage:
        objectives = TermRegistry("objective")

        @objectives.register("equal")
        def equal(a, b):
            return (a - b) ** 2
    """

    def __init__(self, kind: str, entries: Optional[Mapping[str, TermFn]] = None) -> None:
        assert isinstance(kind, str) and len(kind) > 0, "registry kind must be a non-empty string"
        self.kind = kind
        self._entries: Dict[str, TermFn] = {}
        for name, fn in (entries or {}).items():
            self.add(name, fn)

    def add(self, name: str, fn: TermFn) -> None:
        assert isinstance(name, str) and len(name) > 0, "term name must be a non-empty string"
        assert callable(fn), f"{self.kind} {name!r} must be callable"
        if name in self._entries:
            raise ValueError(f"{self.kind} {name!r} already registered")
        self._entries[name] = fn

    def register(self, name: str) -> Callable[[TermFn], TermFn]:
        def _decorator(fn: TermFn) -> TermFn:
            self.add(name, fn)
            return fn

        return _decorator

    def get(self, name: str) -> TermFn:
        try:
            return self._entries[name]
        except KeyError:
            raise TermNotFoundError(name, self.kind) from None

    def dispatch(self, name: str, *args):
        """Look up ``name`` and apply it to ``args``."""
        return self.get(name)(*args)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def merged(self, other: "TermRegistry") -> "TermRegistry":
        """Return a new registry holding both tables; duplicate names are rejected."""
        out = TermRegistry(self.kind, self._entries)
        for name in other.names():
            out.add(name, other.get(name))
        return out

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TermRegistry(kind={self.kind!r}, names={self.names()!r})"
