"""Core write and session components."""

from scribe.core.clock import Clock, LoopClock
from scribe.core.session import EditSession, LaunchData, LaunchItem
from scribe.core.watchdog import (
    WatchdogConfig,
    WriteOutcome,
    WritePhase,
    WriteSession,
    WriteStatus,
    WriteWatchdog,
)

__all__ = [
    # Watchdog
    "WriteWatchdog",
    "WatchdogConfig",
    "WriteOutcome",
    "WriteStatus",
    "WriteSession",
    "WritePhase",
    # Clock
    "Clock",
    "LoopClock",
    # Session
    "EditSession",
    "LaunchData",
    "LaunchItem",
]
