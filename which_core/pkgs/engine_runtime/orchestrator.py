"""Run orchestration: discover, execute, classify, sample."""

import logging
from enum import Enum
from typing import Optional

from ..core_physics import phase_offset_from_text, sample_diffraction, sample_interference
from ..sandbox import (
    ContextFactory, DeterministicRNG, IsolatedPathExecutor, SandboxContextError,
    discover_paths, generate_seed, normalize_seed,
)
from .comparator import TraceComparator
from .schemas import EngineConfig, Mode, RunResult

logger = logging.getLogger(__name__)


class RunState(Enum):
    DISCOVER = "discover"
    EXECUTE_ALL = "execute_all"
    CLASSIFY = "classify"
    SAMPLE_INTERFERENCE = "sample_interference"
    CHOOSE_ONE = "choose_one"
    SAMPLE_DIFFRACTION = "sample_diffraction"
    DONE = "done"


class ExperimentRunner:
    """
    Sequences one run of a multi-path script.

    Discover → ExecuteAll → Classify → (SampleInterference | ChooseOne →
    SampleDiffraction) → Done. No state is retried. Path failures degrade
    only their own PathResult; failure to obtain a context degrades the
    whole run to ``RunResult.fallback``. The runner keeps no per-run state,
    so one instance may serve concurrent runs.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 factory: Optional[ContextFactory] = None):
        self.config = config or EngineConfig()
        self.factory = factory or ContextFactory(self.config.sandbox)
        self.executor = IsolatedPathExecutor(self.factory)
        self.comparator = TraceComparator()

    def run(self, script: str, seed: Optional[int] = None) -> RunResult:
        """Run ``script`` under ``seed`` (clock-derived when omitted).

        Never raises for anything the script does.
        """
        seed = generate_seed() if seed is None else normalize_seed(seed)
        try:
            return self._run(script, seed)
        except SandboxContextError as e:
            logger.error(f"Run {seed} could not obtain an evaluation context: {e}")
        except Exception:
            logger.exception(f"Run {seed} failed unexpectedly")
        return RunResult.fallback(seed)

    def _enter(self, seed: int, state: RunState) -> RunState:
        logger.debug(f"Run {seed}: {state.value}")
        return state

    def _run(self, script: str, seed: int) -> RunResult:
        screen = self.config.screen

        self._enter(seed, RunState.DISCOVER)
        n_paths = discover_paths(script, seed, self.factory)
        if n_paths == 0:
            self._enter(seed, RunState.DONE)
            return RunResult.empty(seed)

        self._enter(seed, RunState.EXECUTE_ALL)
        paths = self.executor.execute_all(script, seed, n_paths)

        self._enter(seed, RunState.CLASSIFY)
        mode = self.comparator.classify(paths)
        sample_rng = DeterministicRNG(seed + self.config.sample_seed_offset)

        if mode is Mode.INTERFERENCE:
            self._enter(seed, RunState.SAMPLE_INTERFERENCE)
            offset = phase_offset_from_text(self.comparator.common_observation(paths))
            sources = [p.return_value for p in paths]
            position = sample_interference(sources, sample_rng, offset, screen)
            chosen = None
        else:
            self._enter(seed, RunState.CHOOSE_ONE)
            chosen = DeterministicRNG(seed).choice_index(n_paths)
            self._enter(seed, RunState.SAMPLE_DIFFRACTION)
            position = sample_diffraction(paths[chosen].return_value, sample_rng, screen)

        self._enter(seed, RunState.DONE)
        logger.debug(f"Run {seed}: mode={mode.value}, paths={n_paths}, "
                     f"chosen={chosen}, position={position:.4f}")
        return RunResult(
            seed=seed,
            mode=mode,
            paths=paths,
            chosen_path=chosen,
            screen_position=position,
        )


def run_experiment(script: str, seed: Optional[int] = None,
                   config: Optional[EngineConfig] = None) -> RunResult:
    """Convenience wrapper: one run with a throwaway runner."""
    return ExperimentRunner(config).run(script, seed)
