"""Domain-level exceptions for the compare service."""


class DispatchError(RuntimeError):
    """Raised when a failure escapes the per-model isolation boundary."""


class BarrierError(RuntimeError):
    """Raised when a completion barrier slot is reported twice or out of range."""
