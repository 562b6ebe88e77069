"""Bounded-wait writer for sink-backed entries.

A write truncates the entry, waits for the sink to leave its busy state,
then seeks to the start and writes the payload. Sinks expose no "wait until
ready" primitive, only a readiness flag, so the watchdog polls that flag on a
fixed interval and gives up after a ceiling. Every call ends in exactly one
``WriteOutcome``: success, timed out, aborted, or failed.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from pydantic import BaseModel, Field

from scribe.config import Settings, settings as default_settings
from scribe.core.clock import Clock, LoopClock
from scribe.entries.handle import EntryHandle
from scribe.errors import (
    NoSelection,
    ScribeError,
    SinkIOError,
    WriteAborted,
    WriteTimedOut,
)
from scribe.sink.base import Sink

logger = logging.getLogger(__name__)

Payload = bytes | bytearray | memoryview | str


class WriteStatus(str, Enum):
    """Terminal state of a write."""

    SUCCESS = "success"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass
class WriteOutcome:
    """Result of one ``write_to`` call.

    Attributes:
        status: How the write ended.
        reason: Human-readable explanation for non-success outcomes.
        bytes_written: Payload size on success.
        poll_count: Readiness re-checks performed after truncating.
        duration_ms: Time from call start to the outcome.
        error: Underlying exception, if any.
    """

    status: WriteStatus
    reason: str | None = None
    bytes_written: int = 0
    poll_count: int = 0
    duration_ms: float = 0
    error: BaseException | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == WriteStatus.SUCCESS

    def raise_for_status(self) -> None:
        """Raise the matching ``ScribeError`` unless the write succeeded."""
        if self.status == WriteStatus.SUCCESS:
            return
        if self.status == WriteStatus.TIMED_OUT:
            raise WriteTimedOut(self.reason or "write timed out")
        if self.status == WriteStatus.ABORTED:
            raise WriteAborted(self.reason or "write aborted")
        if isinstance(self.error, ScribeError):
            raise self.error
        raise SinkIOError(self.reason or "write failed", cause=self.error)


class WatchdogConfig(BaseModel):
    """Timing knobs for the readiness poll.

    Attributes:
        poll_interval_ms: Delay between readiness checks.
        max_wait_ms: Abort the sink once it has been busy this long.
    """

    poll_interval_ms: int = Field(default=100, gt=0)
    max_wait_ms: int = Field(default=4000, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "WatchdogConfig":
        settings = settings or default_settings
        return cls(
            poll_interval_ms=settings.poll_interval_ms,
            max_wait_ms=settings.max_wait_ms,
        )


class WritePhase(str, Enum):
    TRUNCATING = "truncating"
    POLLING = "polling"
    WRITING = "writing"


@dataclass
class WriteSession:
    """State for a single write, owned by the watchdog until it settles."""

    sink: Sink
    payload: bytes
    settled: asyncio.Future
    start_time: float = 0
    elapsed_poll_count: int = 0
    phase: WritePhase = WritePhase.TRUNCATING


def _encode(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class WriteWatchdog:
    """Drives truncate, readiness polling, and write for entry handles.

    Callers must not run two writes against the same entry at once.

    Example:
        watchdog = WriteWatchdog(WatchdogConfig(max_wait_ms=2000))
        outcome = await watchdog.write_to(handle.as_writable(), "new text")
        if not outcome.ok:
            print(outcome.reason)
    """

    def __init__(
        self,
        config: WatchdogConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the watchdog.

        Args:
            config: Poll interval and ceiling. Defaults come from settings.
            clock: Time source. Defaults to the running event loop's clock.
        """
        self.config = config or WatchdogConfig.from_settings()
        self._clock = clock or LoopClock()

    async def write_to(
        self,
        handle: EntryHandle | None,
        payload: Payload | None = None,
        *,
        on_complete: Callable[[WriteOutcome], None] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> WriteOutcome:
        """Write ``payload`` to ``handle`` and report exactly one outcome.

        Args:
            handle: Writable entry, or None when nothing is selected.
            payload: New content. When None, the entry's current content is
                written back at its current length.
            on_complete: Called once with the outcome.
            cancel: When set, the write is aborted at the next poll tick or
                while waiting for write completion.

        Returns:
            The terminal outcome, also passed to ``on_complete``.
        """
        started = self._clock.now_ms()
        outcome = await self._run(handle, payload, cancel)
        outcome.duration_ms = self._clock.now_ms() - started
        if on_complete is not None:
            on_complete(outcome)
        return outcome

    async def _run(
        self,
        handle: EntryHandle | None,
        payload: Payload | None,
        cancel: asyncio.Event | None,
    ) -> WriteOutcome:
        if handle is None:
            return WriteOutcome(WriteStatus.FAILED, reason="no selection", error=NoSelection())

        try:
            sink = handle.create_writer()
            data = _encode(payload) if payload is not None else handle.read_bytes()
        except (ScribeError, OSError) as e:
            logger.warning(f"Could not open {handle.name} for writing: {e}")
            return WriteOutcome(WriteStatus.FAILED, reason=_describe(e), error=e)

        session = WriteSession(
            sink=sink,
            payload=data,
            settled=asyncio.get_running_loop().create_future(),
        )
        self._attach(session)
        try:
            return await self._drive(session, cancel)
        except asyncio.CancelledError:
            if sink.busy:
                sink.abort()
            raise
        finally:
            sink.on_write_end = sink.on_error = sink.on_abort = None

    async def _drive(self, session: WriteSession, cancel: asyncio.Event | None) -> WriteOutcome:
        sink = session.sink
        try:
            sink.truncate(len(session.payload))
        except Exception as e:
            self._fail(session, e)
            return session.settled.result()

        outcome = await self._wait_until_ready(session, cancel)
        if outcome is not None:
            return outcome

        session.phase = WritePhase.WRITING
        try:
            sink.seek(0)
            sink.write(session.payload)
        except Exception as e:
            self._fail(session, e)
            return session.settled.result()

        return await self._wait_until_settled(session, cancel)

    async def _wait_until_ready(
        self,
        session: WriteSession,
        cancel: asyncio.Event | None,
    ) -> WriteOutcome | None:
        """Poll the sink's readiness flag. Returns an outcome only if the write ended."""
        session.phase = WritePhase.POLLING
        session.start_time = self._clock.now_ms()
        sink = session.sink

        while True:
            if session.settled.done():
                return session.settled.result()
            if cancel is not None and cancel.is_set():
                return self._abort(session, WriteStatus.ABORTED, "cancelled")
            if not sink.busy:
                return None

            elapsed = self._clock.now_ms() - session.start_time
            if elapsed >= self.config.max_wait_ms:
                logger.error(
                    f"Write operation taking too long, aborting "
                    f"(sink ready state is {sink.ready_state.value})"
                )
                return self._abort(
                    session,
                    WriteStatus.TIMED_OUT,
                    f"sink still busy after {elapsed:.0f} ms",
                )

            await self._clock.sleep_ms(self.config.poll_interval_ms)
            session.elapsed_poll_count += 1

    async def _wait_until_settled(
        self,
        session: WriteSession,
        cancel: asyncio.Event | None,
    ) -> WriteOutcome:
        if cancel is None:
            return await session.settled

        cancel_wait = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait(
                {session.settled, cancel_wait},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_wait.cancel()

        if session.settled.done():
            return session.settled.result()
        return self._abort(session, WriteStatus.ABORTED, "cancelled")

    # -- settlement -----------------------------------------------------

    def _attach(self, session: WriteSession) -> None:
        sink = session.sink

        def on_write_end() -> None:
            # Truncate also reports completion; only the write phase settles.
            if session.phase != WritePhase.WRITING:
                return
            self._settle(session, WriteOutcome(
                WriteStatus.SUCCESS,
                bytes_written=len(session.payload),
                poll_count=session.elapsed_poll_count,
            ))

        def on_error(exc: BaseException) -> None:
            self._fail(session, exc)

        def on_abort() -> None:
            self._settle(session, WriteOutcome(
                WriteStatus.ABORTED,
                reason="sink aborted",
                poll_count=session.elapsed_poll_count,
            ))

        sink.on_write_end = on_write_end
        sink.on_error = on_error
        sink.on_abort = on_abort

    def _settle(self, session: WriteSession, outcome: WriteOutcome) -> bool:
        if session.settled.done():
            return False
        session.settled.set_result(outcome)
        if outcome.ok:
            logger.info(f"Write complete ({outcome.bytes_written} bytes)")
        return True

    def _fail(self, session: WriteSession, exc: BaseException) -> None:
        reason = _describe(exc)
        if self._settle(session, WriteOutcome(
            WriteStatus.FAILED,
            reason=reason,
            poll_count=session.elapsed_poll_count,
            error=SinkIOError(reason, cause=exc),
        )):
            logger.error(f"Write failed while {session.phase.value}: {reason}")

    def _abort(self, session: WriteSession, status: WriteStatus, reason: str) -> WriteOutcome:
        outcome = WriteOutcome(status, reason=reason, poll_count=session.elapsed_poll_count)
        # Settle first so the sink's own abort notification is ignored.
        self._settle(session, outcome)
        session.sink.abort()
        return session.settled.result()
