"""Repeated runs over consecutive seeds, executed as independent units."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..observability.events import BATCH_COMPLETED, BATCH_PROGRESS, EventBus
from ..sandbox import generate_seed, normalize_seed
from .orchestrator import ExperimentRunner
from .schemas import Mode, RunResult

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Results of a batch, in seed order."""
    requested: int
    results: List[RunResult] = field(default_factory=list)
    cancelled: bool = False
    screen_range: Tuple[float, float] = (-5.0, 5.0)

    @property
    def completed(self) -> int:
        return len(self.results)

    def count_by_mode(self) -> Dict[str, int]:
        counts = {mode.value: 0 for mode in Mode}
        for r in self.results:
            counts[r.mode.value] += 1
        return counts

    def post_select(self, mode: Mode) -> List[RunResult]:
        """Keep only runs classified as ``mode``."""
        return [r for r in self.results if r.mode is mode]

    def positions(self, mode: Optional[Mode] = None) -> np.ndarray:
        selected = self.results if mode is None else self.post_select(mode)
        return np.array([r.screen_position for r in selected], dtype=np.float64)

    def histogram(self, bins: int = 50, mode: Optional[Mode] = None) -> Tuple[np.ndarray, np.ndarray]:
        """Counts of screen positions over the screen range."""
        return np.histogram(self.positions(mode), bins=bins, range=self.screen_range)


class BatchRunner:
    """
    Runs many seeds of the same script on a thread pool.

    Every run owns its contexts, RNG streams and results; nothing mutable
    is shared between runs. ``cancel()`` skips runs that have not started;
    runs already in flight complete normally.
    """

    def __init__(self, runner: ExperimentRunner, max_workers: int = 4,
                 batch_size: int = 50, event_bus: Optional[EventBus] = None):
        self.runner = runner
        self.max_workers = max_workers
        self.batch_size = batch_size
        self.event_bus = event_bus
        self._cancel = threading.Event()

    def cancel(self):
        """Request that pending runs be skipped."""
        logger.info("Batch cancellation requested")
        self._cancel.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    def _run_one(self, script: str, seed: int) -> Optional[RunResult]:
        if self._cancel.is_set():
            return None
        return self.runner.run(script, seed)

    def run_many(self, script: str, count: int, base_seed: Optional[int] = None) -> BatchSummary:
        """Run ``count`` seeds starting at ``base_seed``."""
        if count <= 0:
            raise ValueError("count must be positive")
        self._cancel.clear()
        base = generate_seed() if base_seed is None else base_seed
        seeds = [normalize_seed(base + i) for i in range(count)]
        screen = self.runner.config.screen
        summary = BatchSummary(requested=count, screen_range=screen.screen_range)

        logger.info(f"Starting batch of {count} runs from seed {normalize_seed(base)}")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for start in range(0, count, self.batch_size):
                if self._cancel.is_set():
                    break
                chunk = seeds[start:start + self.batch_size]
                futures = [pool.submit(self._run_one, script, seed) for seed in chunk]
                for future in futures:
                    result = future.result()
                    if result is not None:
                        summary.results.append(result)
                if self.event_bus:
                    self.event_bus.publish(BATCH_PROGRESS, {
                        "completed": summary.completed,
                        "requested": count,
                    })

        summary.cancelled = self._cancel.is_set() and summary.completed < count
        logger.info(f"Batch finished: {summary.completed}/{count} runs, "
                    f"modes={summary.count_by_mode()}")
        if self.event_bus:
            self.event_bus.publish(BATCH_COMPLETED, summary)
        return summary
