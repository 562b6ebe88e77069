"""Writable sinks driven by the write watchdog."""

from scribe.sink.base import InvalidStateError, ReadyState, Sink
from scribe.sink.file import FileSink

__all__ = [
    "Sink",
    "ReadyState",
    "InvalidStateError",
    "FileSink",
]
