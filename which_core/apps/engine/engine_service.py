"""Engine service that wraps the run orchestrator with a clean API."""

import logging
from typing import Any, Dict, Optional

from ...pkgs.core_physics import diffraction_pattern, interference_pattern, phase_offset_from_text
from ...pkgs.engine_runtime import (
    BatchRequest, BatchRunner, BatchSummary, EngineConfig, ExperimentRunner,
    Mode, RunRecorder, RunRequest, RunResult, TraceComparator,
)
from ...pkgs.observability import RUN_COMPLETED, EventBus, MetricsCollector, SeedManager, setup_logging

logger = logging.getLogger(__name__)


class ExperimentService:
    """High-level service interface for running multi-path scripts."""

    def __init__(self, cfg: Optional[Dict[str, Any]] = None):
        self.cfg = cfg or {}
        self.config = EngineConfig.from_dict(self.cfg)
        self.runner = ExperimentRunner(self.config)
        self.recorder = RunRecorder(enabled=True)
        self.metrics = MetricsCollector()
        self.events = EventBus()
        self.seed_manager = SeedManager(self.cfg.get('global_seed'))
        self._batch: Optional[BatchRunner] = None

        setup_logging(self.config.log_level)
        logger.info("ExperimentService initialized")

    def run(self, req: RunRequest) -> RunResult:
        """Execute one run; seeds come from the seed manager when omitted."""
        seed = self.seed_manager.next_seed() if req.seed is None else req.seed

        self.metrics.start_timer("run_duration")
        result = self.runner.run(req.script, seed)
        duration = self.metrics.stop_timer("run_duration")

        self._observe(result)
        logger.debug(f"Run {result.seed} finished in {duration:.4f}s: {result.mode.value}")
        return result

    def run_batch(self, req: BatchRequest) -> BatchSummary:
        """Execute ``req.count`` runs over consecutive seeds."""
        base = self.seed_manager.reserve(req.count) if req.base_seed is None else req.base_seed
        self._batch = BatchRunner(
            self.runner,
            max_workers=self.config.max_workers,
            batch_size=req.batch_size or self.config.batch_size,
            event_bus=self.events,
        )

        self.metrics.start_timer("batch_duration")
        try:
            summary = self._batch.run_many(req.script, req.count, base)
        finally:
            self.metrics.stop_timer("batch_duration")
            self._batch = None

        for result in summary.results:
            self._observe(result)
        return summary

    def cancel_batch(self) -> bool:
        """Skip the not-yet-started runs of the batch in progress, if any."""
        batch = self._batch
        if batch is None:
            return False
        batch.cancel()
        return True

    def _observe(self, result: RunResult):
        self.recorder.log(result)
        self.metrics.observe_run(result.mode.value, result.n_paths)
        self.events.publish(RUN_COMPLETED, result)

    def pattern(self, result: RunResult) -> Dict[str, list]:
        """Normalized intensity curve that produced ``result``'s sample."""
        screen = self.config.screen
        if result.mode is Mode.COLLAPSE:
            x, intensity = diffraction_pattern(result.paths[result.chosen_path].return_value, screen)
        else:
            offset = phase_offset_from_text(TraceComparator.common_observation(result.paths))
            x, intensity = interference_pattern([p.return_value for p in result.paths], offset, screen)
        return {"x": x.tolist(), "intensity": intensity.tolist()}

    def snapshot(self) -> Dict[str, Any]:
        """Return summary snapshot of what the service has run."""
        return {
            "status": "active",
            "metrics_summary": self.metrics.summary_stats(),
            "counters": dict(self.metrics.counters),
            "timers": dict(self.metrics.timers),
            "recent_runs": self.recorder.get_recent(5),
            "seeds_issued": self.seed_manager.issued,
        }

    def export_logs(self, format: str = "jsonl", path: str = "logs/which_runs") -> str:
        """Export recorded runs in the specified format."""
        if format == "csv":
            full_path = f"{path}.csv"
            self.recorder.dump_csv(full_path)
        elif format == "jsonl":
            full_path = f"{path}.jsonl"
            self.recorder.dump_jsonl(full_path)
        else:
            raise ValueError(f"Unsupported format: {format}")

        logger.info(f"Runs exported to: {full_path}")
        return full_path

    def reset(self):
        """Forget recorded runs and metrics."""
        self.recorder.clear()
        self.metrics.reset()
        logger.info("Service reset")
