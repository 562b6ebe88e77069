"""Error taxonomy for entry handles and write sessions.

The watchdog never raises these across a write; it reports them through
``WriteOutcome``. ``WriteOutcome.raise_for_status()`` turns an outcome back
into one of these exceptions for callers that prefer try/except.
"""


class ScribeError(Exception):
    """Base class for all scribe errors."""


class HandleInvalid(ScribeError):
    """Raised when an entry handle was revoked or its file no longer exists."""


class NoSelection(ScribeError):
    """Raised when an operation needs an entry but none was chosen."""

    def __init__(self, message: str = "no selection") -> None:
        super().__init__(message)


class SinkIOError(ScribeError):
    """A truncate or write reported by the sink failed.

    Attributes:
        cause: The underlying exception, if one was reported.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class WriteTimedOut(ScribeError):
    """The sink stayed busy past the readiness ceiling and was aborted."""


class WriteAborted(ScribeError):
    """The write was cancelled before it completed."""
