"""scribe - edit local files through revocable handles with bounded-wait writes."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("scribe-entries")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from scribe.core.session import EditSession
from scribe.core.watchdog import WatchdogConfig, WriteOutcome, WriteStatus, WriteWatchdog
from scribe.entries.handle import EntryHandle
from scribe.entries.store import EntryStore, RetainedReference

__all__ = [
    "EditSession",
    "EntryHandle",
    "EntryStore",
    "RetainedReference",
    "WriteWatchdog",
    "WatchdogConfig",
    "WriteOutcome",
    "WriteStatus",
]
