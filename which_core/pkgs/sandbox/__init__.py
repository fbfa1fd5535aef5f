"""Deterministic multi-path script sandbox.

This package runs user scripts in fresh, disposable contexts:
- Seedable 32-bit RNG and per-path seed derivation
- Counting pass that discovers how many paths a script offers
- Isolated per-path execution with recorded output and deferred calls
"""

from .rng import DeterministicRNG, mulberry32_next, derive_path_seed, normalize_seed, generate_seed
from .errors import SandboxError, SandboxContextError, SandboxLimitExceeded, ScriptRejected
from .results import OutputEvent, PathResult
from .context import ContextFactory, SandboxLimits, ScriptContext
from .discovery import discover_paths
from .executor import IsolatedPathExecutor, execute_path

__all__ = [
    'DeterministicRNG', 'mulberry32_next', 'derive_path_seed', 'normalize_seed', 'generate_seed',
    'SandboxError', 'SandboxContextError', 'SandboxLimitExceeded', 'ScriptRejected',
    'OutputEvent', 'PathResult',
    'ContextFactory', 'SandboxLimits', 'ScriptContext',
    'discover_paths',
    'IsolatedPathExecutor', 'execute_path'
]
