"""Opaque, revocable handles to file entries."""

import logging
import os
from pathlib import Path
from typing import Callable

from scribe.errors import HandleInvalid
from scribe.sink.file import FileSink

logger = logging.getLogger(__name__)


class _Grant:
    """Access grant shared by every handle derived from one pick."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.revoked = False
        self.revoke_listeners: list[Callable[[], None]] = []


class EntryHandle:
    """Capability referencing one file.

    Callers never see the underlying path directly; they read and write
    through the handle and can only ask for a display path. A handle dies
    when its grant is revoked or when the file disappears, after which every
    operation raises ``HandleInvalid``.

    Example:
        handle = EntryHandle.for_path("notes.json")
        text = handle.read_text()
        sink = handle.as_writable().create_writer()
    """

    def __init__(self, grant: _Grant, writable: bool = False) -> None:
        self._grant = grant
        self._writable = writable

    @classmethod
    def for_path(cls, path: str | Path, writable: bool = False) -> "EntryHandle":
        """Create a handle with a fresh grant for an existing file.

        Args:
            path: File to reference.
            writable: Whether the handle may create writers.

        Raises:
            HandleInvalid: If ``path`` is not an existing regular file.
        """
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            raise HandleInvalid(f"No such file: {path}")
        return cls(_Grant(resolved), writable=writable)

    def __repr__(self) -> str:
        mode = "rw" if self._writable else "ro"
        return f"<EntryHandle {self.name!r} {mode}>"

    @property
    def name(self) -> str:
        return self._grant.path.name

    @property
    def is_writable(self) -> bool:
        return self._writable

    @property
    def is_valid(self) -> bool:
        """Whether the grant is live and the file still exists."""
        return not self._grant.revoked and self._grant.path.is_file()

    def revoke(self) -> None:
        """Revoke the grant for this handle and every handle sharing it."""
        if self._grant.revoked:
            return
        self._grant.revoked = True
        logger.info(f"Revoked access to {self.name}")
        for listener in self._grant.revoke_listeners:
            listener()

    def on_revoke(self, listener: Callable[[], None]) -> None:
        """Call ``listener`` once when this handle's grant is revoked."""
        self._grant.revoke_listeners.append(listener)

    def location(self) -> Path:
        """Resolved file location, for retention. Not shown to users."""
        return self._grant.path

    def same_entry(self, other: "EntryHandle") -> bool:
        """Whether both handles reference the same underlying file."""
        return self.location() == other.location()

    def _ensure_valid(self) -> Path:
        if self._grant.revoked:
            raise HandleInvalid(f"Access to {self.name} was revoked")
        if not self._grant.path.is_file():
            raise HandleInvalid(f"{self.name} no longer exists")
        return self._grant.path

    def display_path(self) -> str:
        """Resolve a human-readable path, abbreviating the home directory."""
        path = self._ensure_valid()
        home = Path.home()
        if path == home or home in path.parents:
            return os.path.join("~", str(path.relative_to(home)))
        return str(path)

    def size(self) -> int:
        return self._ensure_valid().stat().st_size

    def read_bytes(self) -> bytes:
        return self._ensure_valid().read_bytes()

    def read_text(self, encoding: str = "utf-8") -> str:
        return self._ensure_valid().read_text(encoding=encoding)

    def as_writable(self) -> "EntryHandle":
        """Return a writable handle sharing this handle's grant."""
        self._ensure_valid()
        if self._writable:
            return self
        return EntryHandle(self._grant, writable=True)

    def create_writer(self) -> FileSink:
        """Open a sink for this entry.

        Raises:
            HandleInvalid: If the handle is revoked or the file is gone.
            PermissionError: If the handle is read-only.
        """
        path = self._ensure_valid()
        if not self._writable:
            raise PermissionError(f"{self.name} was opened read-only")
        return FileSink(path)
