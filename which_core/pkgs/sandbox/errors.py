"""Exception hierarchy for the script sandbox."""


class SandboxError(Exception):
    """Base class for sandbox failures raised by the core itself."""


class SandboxContextError(SandboxError):
    """An evaluation context could not be created or used.

    This is a run-level failure: the orchestrator degrades the whole run
    to the default result instead of degrading a single path.
    """


class ScriptRejected(SandboxError):
    """The script uses a construct the sandbox does not allow."""

    def __init__(self, reason: str, lineno: int = 0):
        self.reason = reason
        self.lineno = lineno
        super().__init__(f"line {lineno}: {reason}" if lineno else reason)


class SandboxLimitExceeded(SandboxError):
    """A per-pass resource limit (deferred calls, output events) was hit."""

    def __init__(self, limit_name: str, limit: int):
        self.limit_name = limit_name
        self.limit = limit
        super().__init__(f"{limit_name} exceeded limit of {limit}")
