from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time

from ep_core.driver import PenaltyOptimizer
from ep_core.minimizer import BatchResult
from ep_core.state import OptimizationState
from ep_core.translation import format_path
from ep_logging.metrics_log import log_records


@dataclass
class OptimizationTracker:
    """Attach to PenaltyOptimizer hooks and log one row per advance to Polars CSV.

    Usage:
        tracker = OptimizationTracker(name="penalty_trace", run_id="demo")
        tracker.attach(optimizer)
        state = optimizer.solve(state)
        tracker.flush()
    """

    name: str
    run_id: str
    buffer: List[Dict[str, Any]] = field(default_factory=list)
    call: int = 0
    prev_energy: Optional[float] = None
    last_timestamp: Optional[float] = None
    log_per_variable: bool = False
    _pending_batch: Optional[BatchResult] = field(default=None, init=False, repr=False)

    def attach(self, optimizer: PenaltyOptimizer) -> None:
        optimizer.on_batch_finished.append(self.on_batch)
        optimizer.on_state_updated.append(self.on_state)
        self.last_timestamp = time.perf_counter()

    def on_batch(self, result: BatchResult) -> None:
        self._pending_batch = result

    def on_state(self, state: OptimizationState) -> None:
        self.call += 1
        now = time.perf_counter()
        compute_cost = None
        if self.last_timestamp is not None:
            compute_cost = float(now - self.last_timestamp)
        self.last_timestamp = now
        row: Dict[str, Any] = {"run_id": self.run_id, "call": int(self.call)}
        row.update(state.summary())
        row["compute_cost"] = float("nan") if compute_cost is None else compute_cost

        batch = self._pending_batch
        self._pending_batch = None
        if batch is not None:
            row["iterations"] = int(batch.iterations)
            row["mean_step_length"] = float(batch.mean_step_length)
            row["line_search_stops"] = int(batch.line_search_stops)
            delta = None if self.prev_energy is None else float(batch.energy - self.prev_energy)
            self.prev_energy = float(batch.energy)
            row["delta_energy"] = float("nan") if delta is None else delta
        else:
            row["iterations"] = 0
            row["mean_step_length"] = float("nan")
            row["line_search_stops"] = 0
            row["delta_energy"] = float("nan")

        energy_fn = state.cached_energy_function
        xs = state.free_variable_handles
        if energy_fn is not None and xs is not None:
            parts = energy_fn.breakdown(xs, state.penalty_weight)
            row["energy:objective"] = parts["objective"]
            row["energy:penalty"] = parts["penalty"]
            row["energy:weighted_penalty"] = parts["weighted_penalty"]
            row["max_violation"] = float(max(energy_fn.constraint_values(xs), default=0.0))
        if self.log_per_variable:
            for path, value in zip(state.free_variable_paths, state.free_variable_values):
                row[f"x:{format_path(path)}"] = float(value)
        self.buffer.append(row)

    def flush(self) -> None:
        if self.buffer:
            log_records(self.name, self.buffer)
            self.buffer.clear()


@dataclass
class BatchTracker:
    """Per inner-batch log: iterations, energy, gradient norm and step statistics."""

    name: str = "penalty_batches"
    run_id: str = "default"
    buffer: List[Dict[str, Any]] = field(default_factory=list)
    batch: int = 0

    def attach(self, optimizer: PenaltyOptimizer) -> None:
        optimizer.on_batch_finished.append(self.record)

    def record(self, result: BatchResult) -> None:
        self.batch += 1
        steps = result.step_lengths
        self.buffer.append({
            "run_id": self.run_id,
            "batch": int(self.batch),
            "iterations": int(result.iterations),
            "energy": float(result.energy),
            "grad_norm": float(result.grad_norm),
            "line_search_stops": int(result.line_search_stops),
            "min_step_length": float(min(steps)) if steps else float("nan"),
            "max_step_length": float(max(steps)) if steps else float("nan"),
            "mean_step_length": float(result.mean_step_length),
        })

    def flush(self) -> None:
        if not self.buffer:
            return
        log_records(self.name, self.buffer)
        self.buffer.clear()
