"""Per-path execution of a script in its own isolated context."""

import logging
from typing import Dict, List, Optional

from .context import ContextFactory
from .errors import SandboxContextError
from .results import OutputEvent, PathResult
from .rng import DeterministicRNG
from .surface import make_selecting_which

logger = logging.getLogger(__name__)


class IsolatedPathExecutor:
    """
    Re-executes the complete script once per path.

    Each pass gets:
    - a fresh context from the factory (globals, builtins, queues)
    - ``math.random`` seeded by ``derive_path_seed(run_seed, path_index)``
    - a ``which`` that calls only the function at ``path_index``

    After the top-level script returns, deferred calls are drained to
    completion with no real waiting. A script failure at any point ends
    the pass and keeps whatever was recorded before it.
    """

    def __init__(self, factory: Optional[ContextFactory] = None):
        self.factory = factory or ContextFactory()

    def execute(self, script: str, run_seed: int, path_index: int) -> PathResult:
        """Execute one path and return its immutable result.

        Raises:
            SandboxContextError: no evaluation context could be obtained.
        """
        outcome: Dict[str, Optional[float]] = {'return_value': None}
        which = make_selecting_which(path_index, outcome)
        rng = DeterministicRNG.for_path(run_seed, path_index)

        with self.factory.open(rng, which, label=f"<path {path_index}>") as ctx:
            try:
                ctx.execute(script)
                ctx.flush()
            except SandboxContextError:
                raise
            except Exception as e:
                logger.debug(f"Path {path_index} ended early with {type(e).__name__}: {e}")
            trace = [OutputEvent(args=args, delay=delay) for args, delay in ctx.events]

        return_value = outcome['return_value']
        return PathResult(
            index=path_index,
            return_value=0.0 if return_value is None else return_value,
            trace=trace,
        )

    def execute_all(self, script: str, run_seed: int, n_paths: int) -> List[PathResult]:
        """Execute paths 0..n_paths-1, each in a separate context."""
        return [self.execute(script, run_seed, i) for i in range(n_paths)]


def execute_path(script: str, run_seed: int, path_index: int,
                 factory: Optional[ContextFactory] = None) -> PathResult:
    return IsolatedPathExecutor(factory).execute(script, run_seed, path_index)
