"""Tests for the file-backed sink."""

import asyncio
import threading

import pytest

from scribe.sink import FileSink, InvalidStateError, ReadyState


def _listen(sink: FileSink) -> tuple[asyncio.Event, list[BaseException]]:
    """Wire a completion event and an error list onto ``sink``."""
    done = asyncio.Event()
    errors: list[BaseException] = []

    def on_error(exc: BaseException) -> None:
        errors.append(exc)
        done.set()

    sink.on_write_end = done.set
    sink.on_error = on_error
    return done, errors


class TestFileSink:
    """Tests for FileSink operations and notifications."""

    @pytest.mark.asyncio
    async def test_truncate_then_write(self, tmp_path):
        """Truncate and write each complete asynchronously and notify."""
        path = tmp_path / "out.txt"
        path.write_bytes(b"old content here")
        sink = FileSink(path)
        done, errors = _listen(sink)

        sink.truncate(3)
        assert sink.busy
        await asyncio.wait_for(done.wait(), timeout=5)
        assert sink.ready_state == ReadyState.DONE
        assert sink.length == 3

        done.clear()
        sink.seek(0)
        sink.write(b"new")
        await asyncio.wait_for(done.wait(), timeout=5)

        assert errors == []
        assert sink.position == 3
        assert path.read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_operations_rejected_while_busy(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_bytes(b"abc")
        sink = FileSink(path)
        done, _ = _listen(sink)

        sink.truncate(0)
        with pytest.raises(InvalidStateError):
            sink.write(b"x")
        with pytest.raises(InvalidStateError):
            sink.seek(0)
        await asyncio.wait_for(done.wait(), timeout=5)

    def test_seek_clamps_to_length(self, tmp_path):
        """Offsets past the end clamp to the end; negative ones count back from it."""
        path = tmp_path / "out.txt"
        path.write_bytes(b"abcdef")
        sink = FileSink(path)

        sink.seek(100)
        assert sink.position == 6
        sink.seek(-2)
        assert sink.position == 4
        sink.seek(-100)
        assert sink.position == 0

    @pytest.mark.asyncio
    async def test_write_error_is_reported(self, tmp_path):
        """A failing write fires on_error instead of on_write_end."""
        path = tmp_path / "out.txt"
        path.write_bytes(b"abc")
        sink = FileSink(path)
        done, errors = _listen(sink)
        path.unlink()

        sink.write(b"x")
        await asyncio.wait_for(done.wait(), timeout=5)

        assert len(errors) == 1
        assert isinstance(errors[0], FileNotFoundError)
        assert not sink.busy

    def test_negative_truncate_rejected(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_bytes(b"abc")
        with pytest.raises(ValueError):
            FileSink(path).truncate(-1)

    @pytest.mark.asyncio
    async def test_abort_in_flight_operation(self, tmp_path):
        """abort() ends the busy state and fires on_abort once."""
        path = tmp_path / "out.txt"
        path.write_bytes(b"abc")
        sink = FileSink(path)
        aborts: list[bool] = []
        sink.on_abort = lambda: aborts.append(True)

        sink.truncate(0)
        sink.abort()
        sink.abort()

        assert not sink.busy
        assert aborts == [True]

    @pytest.mark.asyncio
    async def test_aborted_job_blocks_new_operations_until_on_disk(self, tmp_path):
        """An aborted truncate still lands; new operations wait for it."""
        path = tmp_path / "out.txt"
        path.write_bytes(b"abcdef")
        sink = FileSink(path)
        release = threading.Event()
        original = sink._truncate_file

        def slow_truncate(size: int) -> int:
            release.wait(timeout=5)
            return original(size)

        sink._truncate_file = slow_truncate

        sink.truncate(2)
        sink.abort()

        assert not sink.busy
        assert sink.flushing
        with pytest.raises(InvalidStateError):
            sink.write(b"x")

        release.set()
        for _ in range(500):
            if not sink.flushing:
                break
            await asyncio.sleep(0.01)

        assert not sink.flushing
        assert path.read_bytes() == b"ab"
        sink.seek(0)
