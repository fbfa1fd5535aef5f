"""Objects exposed to executed scripts.

Every object here is built per context. Nothing is module-level mutable
state, so two contexts never observe each other's output, queue or
random stream.
"""

import ast
import builtins
import math as _host_math
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import SandboxLimitExceeded, ScriptRejected
from .rng import DeterministicRNG

SAFE_BUILTIN_NAMES = (
    'abs', 'all', 'any', 'bool', 'dict', 'divmod', 'enumerate', 'filter',
    'float', 'int', 'isinstance', 'len', 'list', 'map', 'max', 'min', 'pow',
    'range', 'repr', 'reversed', 'round', 'set', 'sorted', 'str', 'sum',
    'tuple', 'zip',
    'Exception', 'ValueError', 'TypeError', 'RuntimeError', 'KeyError',
    'IndexError', 'ZeroDivisionError', 'ArithmeticError',
)

# Attribute names that reach frames, code objects or the format mini-language.
BLOCKED_ATTRIBUTES = frozenset({
    'format', 'format_map', 'mro',
    'gi_frame', 'gi_code', 'gi_yieldfrom', 'cr_frame', 'cr_code', 'ag_frame',
    'ag_code', 'f_globals', 'f_locals', 'f_builtins', 'f_back', 'f_code',
    'tb_frame', 'tb_next', 'co_code', 'func_globals',
})


class RestrictedMath:
    """The host ``math`` module with ``random`` bound to a private RNG."""

    def __init__(self, rng: DeterministicRNG):
        for name in dir(_host_math):
            if not name.startswith('_'):
                setattr(self, name, getattr(_host_math, name))
        self.random = rng.random

    def __repr__(self) -> str:
        return "<math>"


class OutputRecorder:
    """Output sink that records one event per call instead of printing."""

    def __init__(self, max_events: int = 10000):
        self.max_events = max_events
        self.events: List[Tuple[List[str], float]] = []
        self.current_delay = 0.0

    def record(self, *args: Any, sep: str = ' ', end: str = '\n', file: Any = None,
               flush: bool = False) -> None:
        # Keyword arguments are accepted for print() compatibility; events
        # keep the argument list, not the rendered line.
        if len(self.events) >= self.max_events:
            raise SandboxLimitExceeded("max_output_events", self.max_events)
        self.events.append(([str(a) for a in args], self.current_delay))

    def clear(self) -> None:
        self.events.clear()
        self.current_delay = 0.0


class Console:
    """``console.log`` spelling of the recorder."""

    def __init__(self, recorder: OutputRecorder):
        self.log = recorder.record

    def __repr__(self) -> str:
        return "<console>"


def coerce_delay(delay: Any) -> float:
    """Non-numeric or negative delays schedule for immediate delivery."""
    if isinstance(delay, bool) or not isinstance(delay, (int, float)):
        return 0.0
    if not _host_math.isfinite(delay) or delay < 0:
        return 0.0
    return float(delay)


class DeferredQueue:
    """Captures scheduled callbacks; drained later without real waiting."""

    def __init__(self, max_calls: int = 10000):
        self.max_calls = max_calls
        self.pending: List[Tuple[Callable[[], Any], float]] = []
        self.scheduled = 0

    def schedule(self, fn: Callable[[], Any], delay: Any = 0) -> int:
        if self.scheduled >= self.max_calls:
            raise SandboxLimitExceeded("max_deferred_calls", self.max_calls)
        self.scheduled += 1
        self.pending.append((fn, coerce_delay(delay)))
        return self.scheduled

    def drain(self, recorder: OutputRecorder) -> None:
        """Run pending callbacks in enqueue order until none remain.

        Callbacks enqueued while a round is running form the next round.
        Output recorded inside a callback carries that callback's delay.
        Exceptions propagate to the caller, which ends the pass.
        """
        while self.pending:
            batch, self.pending = self.pending, []
            for fn, delay in batch:
                recorder.current_delay = delay
                try:
                    fn()
                finally:
                    recorder.current_delay = 0.0

    def clear(self) -> None:
        self.pending.clear()


def build_builtins(recorder: OutputRecorder) -> Dict[str, Any]:
    safe = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
    safe['__build_class__'] = builtins.__build_class__
    safe['print'] = recorder.record
    safe['True'] = True
    safe['False'] = False
    safe['None'] = None
    return safe


class _ScriptGuard(ast.NodeVisitor):
    """Rejects constructs that would reach outside the context."""

    def _reject(self, node: ast.AST, reason: str):
        raise ScriptRejected(reason, getattr(node, 'lineno', 0))

    def visit_Import(self, node):
        self._reject(node, "import statements are not available")

    def visit_ImportFrom(self, node):
        self._reject(node, "import statements are not available")

    def visit_Name(self, node):
        if node.id.startswith('__'):
            self._reject(node, f"name '{node.id}' is not available")
        self.generic_visit(node)

    def visit_Attribute(self, node):
        if node.attr.startswith('_') or node.attr in BLOCKED_ATTRIBUTES:
            self._reject(node, f"attribute '{node.attr}' is not available")
        self.generic_visit(node)

    def visit_MatchClass(self, node):
        # keyword patterns read attributes by name
        for attr in node.kwd_attrs:
            if attr.startswith('_') or attr in BLOCKED_ATTRIBUTES:
                self._reject(node, f"attribute '{attr}' is not available")
        self.generic_visit(node)


def compile_script(source: str, filename: str = "<script>"):
    """Parse, screen and compile a script.

    Raises:
        SyntaxError: the source does not parse.
        ScriptRejected: the source uses a blocked construct.
    """
    tree = ast.parse(source, filename=filename, mode='exec')
    _ScriptGuard().visit(tree)
    return compile(tree, filename, 'exec')


def coerce_return_value(value: Any) -> float:
    """Numbers pass through as float; anything else becomes 0.

    Ints too large for a float also become 0.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        return float(value)
    except OverflowError:
        return 0.0


def make_counting_which(sink: List[int]) -> Callable[..., None]:
    """``which`` for discovery: records how many paths were offered."""

    def which(*fns):
        sink.append(len(fns))

    return which


def make_selecting_which(path_index: int, outcome: Dict[str, Optional[float]]) -> Callable[..., None]:
    """``which`` for execution: calls only ``fns[path_index]``."""

    def which(*fns):
        if path_index < len(fns):
            outcome['return_value'] = coerce_return_value(fns[path_index]())

    return which
