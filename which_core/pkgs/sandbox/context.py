"""Fresh, disposable evaluation contexts for script passes."""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .errors import SandboxContextError
from .rng import DeterministicRNG
from .surface import (
    Console, DeferredQueue, OutputRecorder, RestrictedMath, build_builtins,
    compile_script,
)

logger = logging.getLogger(__name__)


class SandboxLimits(BaseModel):
    """Deterministic per-pass resource limits."""
    max_deferred_calls: int = Field(default=10000, gt=0)
    max_output_events: int = Field(default=10000, gt=0)


class ScriptContext:
    """One isolated evaluation context.

    Owns its globals, builtins, output recorder, deferred queue and RNG.
    Nothing is shared with any other context. Use as a context manager so
    the namespace is released on every exit path.
    """

    def __init__(self, rng: DeterministicRNG, which: Callable[..., Any],
                 limits: SandboxLimits, label: str = "<script>"):
        self.label = label
        self.rng = rng
        self.recorder = OutputRecorder(max_events=limits.max_output_events)
        self.deferred = DeferredQueue(max_calls=limits.max_deferred_calls)
        self.namespace: Dict[str, Any] = {
            '__builtins__': build_builtins(self.recorder),
            '__name__': '__script__',
            'which': which,
            'math': RestrictedMath(rng),
            'console': Console(self.recorder),
            'set_timeout': self.deferred.schedule,
        }
        self.closed = False

    def execute(self, source: str) -> None:
        """Compile and run the whole script in this context's namespace."""
        if self.closed:
            raise SandboxContextError(f"context {self.label} already closed")
        code = compile_script(source, filename=self.label)
        exec(code, self.namespace)

    def flush(self) -> None:
        """Drain deferred calls scheduled so far (and any they schedule)."""
        self.deferred.drain(self.recorder)

    @property
    def events(self) -> List[Tuple[List[str], float]]:
        return self.recorder.events

    def close(self) -> None:
        if self.closed:
            return
        self.namespace.clear()
        self.deferred.clear()
        self.closed = True

    def __enter__(self) -> "ScriptContext":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class ContextFactory:
    """Builds a new ScriptContext for every pass.

    Subclasses may override ``_build`` to place contexts elsewhere; any
    failure to build surfaces as ``SandboxContextError``.
    """

    def __init__(self, limits: Optional[SandboxLimits] = None):
        self.limits = limits or SandboxLimits()

    def open(self, rng: DeterministicRNG, which: Callable[..., Any],
             label: str = "<script>") -> ScriptContext:
        try:
            ctx = self._build(rng, which, label)
        except SandboxContextError:
            raise
        except Exception as e:
            logger.error(f"Failed to create evaluation context {label}: {e}")
            raise SandboxContextError(str(e)) from e
        logger.debug(f"Opened evaluation context {label}")
        return ctx

    def _build(self, rng: DeterministicRNG, which: Callable[..., Any],
               label: str) -> ScriptContext:
        return ScriptContext(rng, which, self.limits, label=label)
