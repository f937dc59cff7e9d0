"""Gradient backends: value and gradient of a scalar function of the variable vector.

The finite-difference backend is pure numpy and always available. JAX and
PyTorch backends are optional and use the library's autodiff instead:

    backend = make_backend("jax")      # requires `uv pip install -e .[jax]`
    value, grad = backend.value_and_grad(fn, np.array([1.0, 2.0]))

Term implementations only use arithmetic operators, so the same catalogue runs
under every backend; the one non-smooth primitive (the one-sided penalty) is
supplied by the backend itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from .interfaces import ScalarFn

__all__ = [
    "FiniteDifferenceBackend",
    "JaxBackend",
    "TorchBackend",
    "make_backend",
]


def _require_jax():
    try:
        import jax  # noqa: F401
        import jax.numpy as jnp  # noqa: F401
    except Exception as exc:
        raise RuntimeError(
            "JAX is required for jax backend. Install with `uv pip install -e .[jax]` (or custom jax install)."
        ) from exc


def _require_torch():
    try:
        import torch  # noqa: F401
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "PyTorch is required for torch backend. Install with `uv pip install -e .[torch]`."
        ) from exc


@dataclass
class FiniteDifferenceBackend:
    """Central differences over a float64 numpy vector.

    Exact (up to rounding) for quadratic terms; across the kink of a penalty the
    estimate is smeared over ±grad_eps.
    """

    grad_eps: float = 1e-6
    name: str = "finite_difference"

    def __post_init__(self) -> None:
        assert self.grad_eps > 0.0, "grad_eps must be > 0"

    def value_and_grad(self, fn: ScalarFn, xs: np.ndarray) -> Tuple[float, np.ndarray]:
        x = np.array(xs, dtype=float)
        base = float(fn(x))
        grads = np.zeros_like(x)
        h = float(self.grad_eps)
        for i in range(x.size):
            orig = x[i]
            x[i] = orig + h
            f_plus = float(fn(x))
            x[i] = orig - h
            f_minus = float(fn(x))
            x[i] = orig
            grads[i] = (f_plus - f_minus) / (2.0 * h)
        return base, grads

    def penalty(self, c: Any) -> float:
        gap = max(float(c), 0.0)
        return gap * gap


@dataclass
class JaxBackend:
    """jax.value_and_grad on a float64 vector (x64 is switched on by default)."""

    enable_x64: bool = True
    name: str = "jax"

    def __post_init__(self) -> None:
        _require_jax()
        import jax
        import jax.numpy as jnp

        if self.enable_x64:
            jax.config.update("jax_enable_x64", True)
        self.jax = jax
        self.jnp = jnp

    def value_and_grad(self, fn: ScalarFn, xs: np.ndarray) -> Tuple[float, np.ndarray]:
        jnp = self.jnp
        x = jnp.asarray(np.asarray(xs, dtype=float))
        value, grads = self.jax.value_and_grad(fn)(x)
        return float(value), np.asarray(grads, dtype=float)

    def penalty(self, c: Any) -> Any:
        gap = self.jnp.maximum(c, 0.0)
        return gap * gap


@dataclass
class TorchBackend:
    """torch.autograd on a float64 leaf tensor."""

    device: str = "cpu"
    name: str = "torch"

    def __post_init__(self) -> None:
        _require_torch()
        import torch

        self._torch = torch

    def value_and_grad(self, fn: ScalarFn, xs: np.ndarray) -> Tuple[float, np.ndarray]:
        torch = self._torch
        x = torch.tensor(
            np.asarray(xs, dtype=float),
            dtype=torch.float64,
            device=torch.device(self.device),
            requires_grad=True,
        )
        out = fn(x)
        (grads,) = torch.autograd.grad(out, x)
        return float(out.detach().cpu()), grads.detach().cpu().numpy().astype(float)

    def penalty(self, c: Any) -> Any:
        torch = self._torch
        gap = torch.clamp(torch.as_tensor(c, dtype=torch.float64), min=0.0)
        return gap * gap


def make_backend(name: str, **kwargs: Any):
    """Construct a backend by name: ``finite_difference`` (alias ``fd``), ``jax`` or ``torch``."""
    key = str(name).strip().lower()
    if key in ("finite_difference", "fd", "numpy"):
        return FiniteDifferenceBackend(**kwargs)
    if key == "jax":
        return JaxBackend(**kwargs)
    if key == "torch":
        return TorchBackend(**kwargs)
    raise ValueError(f"unknown gradient backend: {name!r}")
