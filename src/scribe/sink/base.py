"""Writer contract consumed by the write watchdog.

A sink mirrors a host file writer: operations are started synchronously,
run in the background, and report back through notification callbacks.
While an operation is in flight the sink is ``WRITING`` and refuses to
start another one.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable


class ReadyState(str, Enum):
    """Lifecycle state of a sink.

    Attributes:
        INIT: No operation has been started yet.
        WRITING: An operation is in flight.
        DONE: The last operation finished, failed, or was aborted.
    """

    INIT = "init"
    WRITING = "writing"
    DONE = "done"


class InvalidStateError(RuntimeError):
    """Raised when an operation is started while the sink is busy."""


class Sink(ABC):
    """Abstract writable stream bound to one entry.

    Listeners are plain attributes, assigned by whoever drives the sink:

    - ``on_write_end()`` after a truncate or write completes
    - ``on_error(exc)`` when a truncate or write fails
    - ``on_abort()`` after ``abort()`` stopped an in-flight operation
    """

    def __init__(self) -> None:
        self.ready_state = ReadyState.INIT
        self.on_write_end: Callable[[], None] | None = None
        self.on_error: Callable[[BaseException], None] | None = None
        self.on_abort: Callable[[], None] | None = None

    @property
    def busy(self) -> bool:
        """Whether an operation is still in flight."""
        return self.ready_state == ReadyState.WRITING

    @property
    @abstractmethod
    def position(self) -> int:
        """Current write offset."""
        ...

    @property
    @abstractmethod
    def length(self) -> int:
        """Current length of the underlying file."""
        ...

    @abstractmethod
    def truncate(self, size: int) -> None:
        """Start truncating (or extending) the file to ``size`` bytes."""
        ...

    @abstractmethod
    def seek(self, offset: int) -> None:
        """Move the write offset. Synchronous; negative offsets count from the end."""
        ...

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Start writing ``data`` at the current offset."""
        ...

    @abstractmethod
    def abort(self) -> None:
        """Stop the in-flight operation, if any."""
        ...

    def _check_idle(self) -> None:
        if self.busy:
            raise InvalidStateError("sink is busy with a previous operation")

    def _emit_write_end(self) -> None:
        if self.on_write_end is not None:
            self.on_write_end()

    def _emit_error(self, exc: BaseException) -> None:
        if self.on_error is not None:
            self.on_error(exc)

    def _emit_abort(self) -> None:
        if self.on_abort is not None:
            self.on_abort()
