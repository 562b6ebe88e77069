"""File-backed sink that runs blocking I/O in the loop's executor."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Callable

from scribe.sink.base import InvalidStateError, ReadyState, Sink

logger = logging.getLogger(__name__)


class FileSink(Sink):
    """Sink writing to a regular file on the local file system.

    Each truncate or write runs in the default executor of the running
    event loop, so it must be started from inside a coroutine. The sink is
    ``WRITING`` until the executor job finishes and the matching
    notification has been fired.

    ``abort()`` ends the busy state at once, but an executor job that already
    started cannot be interrupted and still reaches the disk. Until it has
    (see ``flushing``), starting another operation raises ``InvalidStateError``.

    Example:
        sink = FileSink("/tmp/notes.txt")
        sink.on_write_end = done.set
        sink.truncate(0)
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the sink.

        Args:
            path: Path of an existing file to write to.
        """
        super().__init__()
        self._path = Path(path)
        self._position = 0
        self._length = self._path.stat().st_size
        self._task: asyncio.Task | None = None
        self._job: asyncio.Future | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def flushing(self) -> bool:
        """Whether an executor job is still running against the file."""
        return self._job is not None

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return self._length

    def truncate(self, size: int) -> None:
        self._check_idle()
        if size < 0:
            raise ValueError(f"Cannot truncate to a negative size: {size}")
        self._start(self._truncate_file, (size,), self._apply_truncate)

    def seek(self, offset: int) -> None:
        self._check_idle()
        if offset < 0:
            offset = max(self._length + offset, 0)
        self._position = min(offset, self._length)

    def write(self, data: bytes) -> None:
        self._check_idle()
        self._start(self._write_file, (bytes(data), self._position), self._apply_write)

    def abort(self) -> None:
        if not self.busy:
            return
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.ready_state = ReadyState.DONE
        logger.debug(f"Aborted pending operation on {self._path}")
        self._emit_abort()

    def _check_idle(self) -> None:
        super()._check_idle()
        if self.flushing:
            raise InvalidStateError("an aborted operation is still finishing on disk")

    # -- executor jobs --------------------------------------------------

    def _truncate_file(self, size: int) -> int:
        os.truncate(self._path, size)
        return size

    def _write_file(self, data: bytes, offset: int) -> int:
        with open(self._path, "r+b") as f:
            f.seek(offset)
            f.write(data)
            f.flush()
        return offset + len(data)

    def _apply_truncate(self, size: int) -> None:
        self._length = size
        self._position = min(self._position, size)

    def _apply_write(self, end: int) -> None:
        self._position = end
        self._length = max(self._length, end)

    # -- scheduling -----------------------------------------------------

    def _start(
        self,
        job: Callable[..., int],
        args: tuple[Any, ...],
        apply: Callable[[int], None],
    ) -> None:
        loop = asyncio.get_running_loop()
        self.ready_state = ReadyState.WRITING
        self._job = loop.run_in_executor(None, job, *args)
        self._job.add_done_callback(self._job_finished)
        self._task = loop.create_task(self._run(self._job, apply))

    def _job_finished(self, job: asyncio.Future) -> None:
        # Failures after an abort have no listener left; mark them retrieved.
        if not job.cancelled():
            job.exception()
        if self._job is job:
            self._job = None

    async def _run(self, job: asyncio.Future, apply: Callable[[int], None]) -> None:
        try:
            # Shielded so abort() cancels only the wait, never the job itself.
            result = await asyncio.shield(job)
        except Exception as e:
            self._task = None
            self.ready_state = ReadyState.DONE
            logger.debug(f"Sink operation failed on {self._path}: {e}")
            self._emit_error(e)
            return

        apply(result)
        self._task = None
        self.ready_state = ReadyState.DONE
        self._emit_write_end()
