"""Which Core - deterministic multi-path script sandbox and outcome sampler."""

__version__ = "0.1.0"

# Sandbox
from .pkgs.sandbox import (
    DeterministicRNG, derive_path_seed,
    OutputEvent, PathResult,
    ContextFactory, SandboxLimits,
    discover_paths, IsolatedPathExecutor,
    SandboxError, SandboxContextError
)

# Screen physics
from .pkgs.core_physics import (
    ScreenConfig,
    sample_interference, sample_diffraction,
    interference_pattern, diffraction_pattern
)

from .pkgs.engine_runtime import (
    Mode, RunResult, RunRequest, BatchRequest, EngineConfig,
    TraceComparator, ExperimentRunner, run_experiment,
    BatchRunner, BatchSummary, RunRecorder
)

from .pkgs.observability import (
    setup_logging,
    MetricsCollector, SeedManager,
    EventBus
)

# High-level service
from .apps.engine.engine_service import ExperimentService

__all__ = [
    # Sandbox
    'DeterministicRNG', 'derive_path_seed',
    'OutputEvent', 'PathResult',
    'ContextFactory', 'SandboxLimits',
    'discover_paths', 'IsolatedPathExecutor',
    'SandboxError', 'SandboxContextError',

    # Screen physics
    'ScreenConfig',
    'sample_interference', 'sample_diffraction',
    'interference_pattern', 'diffraction_pattern',

    # Engine runtime
    'Mode', 'RunResult', 'RunRequest', 'BatchRequest', 'EngineConfig',
    'TraceComparator', 'ExperimentRunner', 'run_experiment',
    'BatchRunner', 'BatchSummary', 'RunRecorder',

    # Observability
    'setup_logging', 'MetricsCollector', 'SeedManager', 'EventBus',

    # High-level interface
    'ExperimentService'
]
