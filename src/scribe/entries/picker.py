"""File pickers supplying entry handles.

The real chooser is a host dialog; these pickers are the console-side
stand-ins used by the CLI and tests.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from rich.console import Console

from scribe.entries.handle import EntryHandle
from scribe.errors import HandleInvalid


class PickKind(str, Enum):
    """What the user is choosing a file for."""

    OPEN = "openFile"
    SAVE = "saveFile"


def matches_extensions(path: Path, accepts: list[str] | None) -> bool:
    """Check ``path`` against an extension allow-list (empty allows all)."""
    if not accepts:
        return True
    suffix = path.suffix.lstrip(".").lower()
    return suffix in {ext.lstrip(".").lower() for ext in accepts}


def handle_for_pick(
    path: Path,
    kind: PickKind,
    accepts: list[str] | None,
) -> EntryHandle | None:
    """Turn a chosen path into a handle.

    Open picks must name an existing file passing the allow-list and give a
    read-only handle. Save picks create the file if needed and give a
    writable handle.
    """
    path = path.expanduser()
    if kind == PickKind.SAVE:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        return EntryHandle.for_path(path, writable=True)

    if not matches_extensions(path, accepts):
        return None
    try:
        return EntryHandle.for_path(path)
    except HandleInvalid:
        return None


class EntryPicker(ABC):
    """Source of user-chosen entries."""

    @abstractmethod
    async def choose(
        self,
        kind: PickKind,
        accepts: list[str] | None = None,
        suggested_name: str | None = None,
    ) -> EntryHandle | None:
        """Let the user choose an entry.

        Args:
            kind: Open an existing file or choose a save target.
            accepts: Extension allow-list for open picks.
            suggested_name: Default file name offered for save picks.

        Returns:
            The chosen handle, or None if the user cancelled.
        """
        ...


class PathPicker(EntryPicker):
    """Picker that always "chooses" a fixed path, or cancels if it has none."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None

    async def choose(
        self,
        kind: PickKind,
        accepts: list[str] | None = None,
        suggested_name: str | None = None,
    ) -> EntryHandle | None:
        if self._path is None:
            return None
        path = self._path
        if kind == PickKind.SAVE and path.is_dir() and suggested_name:
            path = path / suggested_name
        return handle_for_pick(path, kind, accepts)


class ConsolePicker(EntryPicker):
    """Picker that asks for a path on the terminal. An empty answer cancels."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    async def choose(
        self,
        kind: PickKind,
        accepts: list[str] | None = None,
        suggested_name: str | None = None,
    ) -> EntryHandle | None:
        if kind == PickKind.SAVE:
            hint = f" [{suggested_name}]" if suggested_name else ""
            answer = self._console.input(f"Save as{hint}: ").strip() or (suggested_name or "")
        else:
            hint = f" ({', '.join('.' + e for e in accepts)})" if accepts else ""
            answer = self._console.input(f"Open file{hint}: ").strip()

        if not answer:
            return None
        return handle_for_pick(Path(answer), kind, accepts)
