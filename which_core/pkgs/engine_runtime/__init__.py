"""Engine runtime orchestration.

This package sequences sandbox passes and physics sampling into runs
without containing script execution or physics logic itself.
"""

from .schemas import Mode, RunResult, RunRequest, BatchRequest, EngineConfig
from .comparator import TraceComparator, canonical_trace
from .orchestrator import ExperimentRunner, RunState, run_experiment
from .batch import BatchRunner, BatchSummary
from .recorder import RunRecorder

__all__ = [
    'Mode', 'RunResult', 'RunRequest', 'BatchRequest', 'EngineConfig',
    'TraceComparator', 'canonical_trace',
    'ExperimentRunner', 'RunState', 'run_experiment',
    'BatchRunner', 'BatchSummary',
    'RunRecorder'
]
