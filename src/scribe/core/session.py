"""Edit session tying entry selection, text loading, and writes together."""

import logging
import mimetypes
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from scribe.config import settings
from scribe.core.watchdog import WriteOutcome, WriteStatus, WriteWatchdog
from scribe.entries.handle import EntryHandle
from scribe.entries.picker import PickKind
from scribe.entries.store import EntryStore
from scribe.errors import HandleInvalid

logger = logging.getLogger(__name__)


class LaunchItem(BaseModel):
    """One entry handed to the process at launch."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entry: EntryHandle | None = None


class LaunchData(BaseModel):
    """Entries the host launched us with, e.g. via "open with"."""

    items: list[LaunchItem] = Field(default_factory=list)

    @classmethod
    def from_paths(cls, paths: list[str | Path]) -> "LaunchData":
        """Build launch data from file paths.

        Raises:
            HandleInvalid: If a path is not an existing file.
        """
        return cls(items=[LaunchItem(entry=EntryHandle.for_path(p)) for p in paths])

    def first_entry(self) -> EntryHandle | None:
        if self.items and self.items[0].entry is not None:
            return self.items[0].entry
        return None


class EditSession:
    """The entry being edited, its text, and the last status message.

    Example:
        session = EditSession(store, WriteWatchdog())
        await session.load_initial(launch_data)
        session.text += "\\n"
        outcome = await session.write_back()
    """

    def __init__(
        self,
        store: EntryStore,
        watchdog: WriteWatchdog | None = None,
        accepts: list[str] | None = None,
        suggested_name: str | None = None,
    ) -> None:
        self.store = store
        self.watchdog = watchdog or WriteWatchdog()
        self.accepts = accepts if accepts is not None else settings.accepted_extensions
        self.suggested_name = suggested_name or settings.suggested_name

        self.entry: EntryHandle | None = None
        self.text = ""
        self.status = ""

    @property
    def display_path(self) -> str | None:
        if self.entry is None:
            return None
        return self.entry.display_path()

    def load(self, handle: EntryHandle) -> str:
        """Make ``handle`` the current entry and read its text."""
        self.text = handle.read_text()
        self.entry = handle
        logger.info(f"Loaded {handle.name} ({len(self.text)} chars)")
        return self.text

    async def load_initial(self, launch_data: LaunchData | None = None) -> EntryHandle | None:
        """Load the launch entry if there is one, else the retained entry."""
        handle = launch_data.first_entry() if launch_data else None
        if handle is None:
            handle = self.store.restore()
        if handle is None:
            return None
        self.load(handle)
        return handle

    async def choose_file(self) -> EntryHandle | None:
        """Pick a file to open, retain it, and load it."""
        handle = await self.store.acquire(PickKind.OPEN, self.accepts)
        if handle is None:
            self.status = "No file selected."
            return None
        self.store.retain(handle)
        self.load(handle)
        self.status = ""
        return handle

    def accept_drop(self, paths: list[str | Path]) -> EntryHandle | None:
        """Load the first dropped path that looks like a text file."""
        chosen = None
        for path in paths:
            mime, _ = mimetypes.guess_type(str(path))
            if mime and mime.startswith("text/") and Path(path).is_file():
                chosen = EntryHandle.for_path(path)
                break

        if chosen is None:
            self.entry = None
            self.status = "Sorry. That's not a text file."
            return None

        self.status = ""
        self.load(chosen)
        return chosen

    async def save_as(self, text: str | None = None) -> WriteOutcome:
        """Pick a save target and write ``text`` (or the session text) to it."""
        handle = await self.store.acquire(
            PickKind.SAVE, suggested_name=self.suggested_name
        )
        payload = self.text if text is None else text
        outcome = await self.watchdog.write_to(handle, payload)
        self._report(outcome)
        return outcome

    async def write_back(self, text: str | None = None) -> WriteOutcome:
        """Write to the current entry.

        Without ``text`` the entry's own content is written back unchanged.
        """
        target = None
        if self.entry is not None:
            try:
                target = self.entry.as_writable()
            except HandleInvalid as e:
                outcome = WriteOutcome(WriteStatus.FAILED, reason=str(e), error=e)
                self._report(outcome)
                return outcome

        outcome = await self.watchdog.write_to(target, text)
        if outcome.ok and text is not None:
            self.text = text
        self._report(outcome)
        return outcome

    def _report(self, outcome: WriteOutcome) -> None:
        if outcome.ok:
            self.status = "Write complete :)"
        elif outcome.reason == "no selection":
            self.status = "Nothing selected."
        elif outcome.status == WriteStatus.TIMED_OUT:
            self.status = "Write operation taking too long, aborted."
        else:
            self.status = f"Write {outcome.status.value}: {outcome.reason}"
