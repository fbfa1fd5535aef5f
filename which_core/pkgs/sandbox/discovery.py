"""Counting pass: learn how many paths a script offers to ``which``."""

import logging
from typing import List, Optional

from .context import ContextFactory
from .errors import SandboxContextError
from .rng import DeterministicRNG
from .surface import make_counting_which

logger = logging.getLogger(__name__)


def discover_paths(script: str, run_seed: int,
                   factory: Optional[ContextFactory] = None) -> int:
    """Run the script once with a ``which`` that only counts its arguments.

    None of the offered paths are called and deferred calls are never
    drained. Script errors are swallowed; if ``which`` was never reached
    the path count is 0. The last call to ``which`` wins.

    Raises:
        SandboxContextError: no evaluation context could be obtained.
    """
    factory = factory or ContextFactory()
    counts: List[int] = []
    which = make_counting_which(counts)

    with factory.open(DeterministicRNG(run_seed), which, label="<discovery>") as ctx:
        try:
            ctx.execute(script)
        except SandboxContextError:
            raise
        except Exception as e:
            logger.debug(f"Discovery pass raised {type(e).__name__}: {e}")

    n_paths = counts[-1] if counts else 0
    logger.debug(f"Discovered {n_paths} paths")
    return n_paths
