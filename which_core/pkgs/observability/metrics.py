"""Run metrics and seed sequencing."""

import threading
import time
from typing import Any, Dict, Optional

from ..sandbox.rng import generate_seed, normalize_seed


class SeedManager:
    """Hands out run seeds as a deterministic sequence from a base seed."""

    def __init__(self, base_seed: Optional[int] = None):
        self.base_seed = generate_seed() if base_seed is None else normalize_seed(base_seed)
        self.issued = 0
        self._lock = threading.Lock()

    def next_seed(self) -> int:
        """Seed for the next run: base, base+1, base+2, ..."""
        with self._lock:
            seed = normalize_seed(self.base_seed + self.issued)
            self.issued += 1
        return seed

    def reserve(self, count: int) -> int:
        """Reserve ``count`` consecutive seeds and return the first."""
        with self._lock:
            first = normalize_seed(self.base_seed + self.issued)
            self.issued += count
        return first


class MetricsCollector:
    """Counters and timers for runs served by the engine."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.timers: Dict[str, float] = {}
        self.start_times: Dict[str, float] = {}

    def increment_counter(self, name: str, delta: int = 1):
        self.counters[name] = self.counters.get(name, 0) + delta

    def start_timer(self, name: str):
        self.start_times[name] = time.perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop a timer and record its duration in seconds."""
        if name not in self.start_times:
            return 0.0
        duration = time.perf_counter() - self.start_times.pop(name)
        self.timers[name] = duration
        return duration

    def observe_run(self, mode: str, n_paths: int):
        """Count a finished run by mode and path count."""
        self.increment_counter("total_runs")
        self.increment_counter(f"runs_{mode}")
        self.increment_counter("total_paths", n_paths)

    def reset(self):
        self.counters.clear()
        self.timers.clear()
        self.start_times.clear()

    def summary_stats(self) -> Dict[str, Any]:
        total = self.counters.get("total_runs", 0)
        collapsed = self.counters.get("runs_collapse", 0)
        return {
            "total_runs": total,
            "collapse_fraction": collapsed / total if total else 0.0,
            "total_paths": self.counters.get("total_paths", 0),
            "timer_total": sum(self.timers.values())
        }
