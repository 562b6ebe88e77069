"""Tests for the edit session, using real files."""

import pytest

from scribe.core.session import EditSession, LaunchData
from scribe.core.watchdog import WatchdogConfig, WriteStatus, WriteWatchdog
from scribe.entries import EntryHandle, EntryStore, LocalStorage, PathPicker


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_session(tmp_path, picker=None) -> EditSession:
    store = EntryStore(LocalStorage(tmp_path / "storage.json"), picker)
    watchdog = WriteWatchdog(WatchdogConfig(poll_interval_ms=5, max_wait_ms=2000))
    return EditSession(store, watchdog, accepts=["json"], suggested_name="Bookmarks.html")


@pytest.fixture
def notes(tmp_path):
    path = tmp_path / "notes.json"
    path.write_text('{"a": 1}', encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestLoading:
    """Choosing, restoring, and launching entries."""

    @pytest.mark.asyncio
    async def test_choose_file_retains_and_loads(self, tmp_path, notes):
        """A chosen file is loaded and can be restored by a later session."""
        session = _make_session(tmp_path, PathPicker(notes))

        handle = await session.choose_file()

        assert handle is not None
        assert session.text == '{"a": 1}'
        assert session.status == ""

        later = _make_session(tmp_path)
        restored = await later.load_initial()
        assert restored is not None and restored.same_entry(handle)
        assert later.text == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_choose_file_cancelled(self, tmp_path):
        session = _make_session(tmp_path, PathPicker(None))

        assert await session.choose_file() is None
        assert session.status == "No file selected."
        assert session.store.retained() is None

    @pytest.mark.asyncio
    async def test_choose_file_outside_allow_list(self, tmp_path):
        other = tmp_path / "notes.txt"
        other.write_text("hi")
        session = _make_session(tmp_path, PathPicker(other))

        assert await session.choose_file() is None

    @pytest.mark.asyncio
    async def test_launch_data_bypasses_restore(self, tmp_path, notes):
        """A launch entry wins over the retained one."""
        launched = tmp_path / "launched.json"
        launched.write_text("[]")
        session = _make_session(tmp_path)
        session.store.retain(EntryHandle.for_path(notes))

        handle = await session.load_initial(LaunchData.from_paths([launched]))

        assert handle.name == "launched.json"
        assert session.text == "[]"

    @pytest.mark.asyncio
    async def test_nothing_to_load(self, tmp_path):
        session = _make_session(tmp_path)
        assert await session.load_initial(LaunchData()) is None
        assert session.entry is None

    def test_accept_drop_picks_first_text_file(self, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG")
        text = tmp_path / "readme.txt"
        text.write_text("dropped")
        session = _make_session(tmp_path)

        handle = session.accept_drop([image, text])

        assert handle.name == "readme.txt"
        assert session.text == "dropped"

    def test_accept_drop_rejects_non_text(self, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG")
        session = _make_session(tmp_path)

        assert session.accept_drop([image]) is None
        assert session.status == "Sorry. That's not a text file."


class TestWriting:
    """Write-back and save-as through the watchdog."""

    @pytest.mark.asyncio
    async def test_write_back_new_text(self, tmp_path, notes):
        """New text replaces the file content, including when it is shorter."""
        session = _make_session(tmp_path)
        session.load(EntryHandle.for_path(notes))

        outcome = await session.write_back("{}")

        assert outcome.ok
        assert notes.read_text() == "{}"
        assert session.text == "{}"
        assert session.status == "Write complete :)"

    @pytest.mark.asyncio
    async def test_write_back_unchanged(self, tmp_path, notes):
        """Without new text the existing content is rewritten as is."""
        session = _make_session(tmp_path)
        session.load(EntryHandle.for_path(notes))

        outcome = await session.write_back()

        assert outcome.ok
        assert notes.read_text() == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_write_back_without_entry(self, tmp_path):
        session = _make_session(tmp_path)

        outcome = await session.write_back("text")

        assert outcome.status == WriteStatus.FAILED
        assert session.status == "Nothing selected."

    @pytest.mark.asyncio
    async def test_write_back_revoked_entry(self, tmp_path, notes):
        session = _make_session(tmp_path)
        session.load(EntryHandle.for_path(notes))
        session.entry.revoke()

        outcome = await session.write_back("x")

        assert outcome.status == WriteStatus.FAILED
        assert "revoked" in outcome.reason
        assert notes.read_text() == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_save_as_writes_suggested_file(self, tmp_path):
        """Saving into a directory creates the suggested file with the session text."""
        target_dir = tmp_path / "out"
        target_dir.mkdir()
        session = _make_session(tmp_path, PathPicker(target_dir))
        session.text = "<html></html>"

        outcome = await session.save_as()

        assert outcome.ok
        assert (target_dir / "Bookmarks.html").read_text() == "<html></html>"
        assert session.status == "Write complete :)"

    @pytest.mark.asyncio
    async def test_save_as_cancelled(self, tmp_path):
        session = _make_session(tmp_path, PathPicker(None))

        outcome = await session.save_as("text")

        assert outcome.reason == "no selection"
        assert session.status == "Nothing selected."
