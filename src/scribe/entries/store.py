"""Acquire, retain, and restore entry handles."""

import logging
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ValidationError

from scribe.entries.handle import EntryHandle
from scribe.entries.picker import EntryPicker, PickKind
from scribe.entries.storage import LocalStorage
from scribe.errors import HandleInvalid

logger = logging.getLogger(__name__)

# Storage key for the single retained entry
RETAINED_ENTRY_KEY = "chosenFile"


class RetainedReference(BaseModel):
    """Serializable token that lets an entry be re-acquired after a restart.

    Callers treat it as opaque; only ``EntryStore.restore`` reads its fields.

    Attributes:
        token: Unique identifier of this retention.
        path: Resolved file location the grant was issued for.
        writable: Whether the retained handle could create writers.
        retained_at: When the entry was retained.
    """

    token: str = Field(default_factory=lambda: uuid.uuid4().hex)
    path: str = Field(..., description="Resolved file location")
    writable: bool = Field(default=False)
    retained_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EntryStore:
    """Entry acquisition and retention.

    Holds at most one retained reference at a time; retaining a new entry
    replaces the previous one. Revoking a retained or restored handle drops
    the reference, so it cannot be restored afterwards.

    Example:
        store = EntryStore(LocalStorage(settings.get_storage_path()), ConsolePicker())
        handle = await store.acquire(PickKind.OPEN, ["json"])
        if handle:
            store.retain(handle)
        ...
        handle = store.restore()
    """

    def __init__(self, storage: LocalStorage, picker: EntryPicker | None = None) -> None:
        """Initialize the store.

        Args:
            storage: Key/value storage holding the retained reference.
            picker: Picker used by ``acquire``. Without one, every pick cancels.
        """
        self._storage = storage
        self._picker = picker

    async def acquire(
        self,
        kind: PickKind,
        accepts: list[str] | None = None,
        suggested_name: str | None = None,
    ) -> EntryHandle | None:
        """Ask the picker for an entry.

        Returns:
            The chosen handle, or None if the user cancelled.
        """
        if self._picker is None:
            return None
        handle = await self._picker.choose(kind, accepts, suggested_name)
        if handle is None:
            logger.debug(f"Pick cancelled ({kind.value})")
        return handle

    def retain(self, handle: EntryHandle) -> RetainedReference:
        """Persist a reference to ``handle``, replacing any earlier one.

        Raises:
            HandleInvalid: If the handle is no longer valid.
        """
        if not handle.is_valid:
            raise HandleInvalid(f"Cannot retain {handle.name}: handle is no longer valid")

        reference = RetainedReference(
            path=str(handle.location()),
            writable=handle.is_writable,
        )
        self._storage.set(RETAINED_ENTRY_KEY, reference.model_dump(mode="json"))
        self._drop_on_revoke(handle, reference.token)
        logger.info(f"Retained entry {handle.name} ({reference.token})")
        return reference

    def retained(self) -> RetainedReference | None:
        """Return the stored reference without resolving it."""
        try:
            raw = self._storage.get(RETAINED_ENTRY_KEY)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable storage file {self._storage.path}: {e}")
            return None
        if raw is None:
            return None
        try:
            return RetainedReference.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed retained entry: {e}")
            return None

    def restore(self) -> EntryHandle | None:
        """Resolve the retained reference back into a live handle.

        Returns:
            The handle, or None if nothing is retained, the retained handle
            was revoked, or the entry is gone.
        """
        reference = self.retained()
        if reference is None:
            return None

        try:
            handle = EntryHandle.for_path(reference.path, writable=reference.writable)
        except HandleInvalid as e:
            logger.info(f"Retained entry {reference.token} could not be restored: {e}")
            return None

        self._drop_on_revoke(handle, reference.token)
        logger.debug(f"Restored entry {handle.name} ({reference.token})")
        return handle

    def forget(self) -> bool:
        """Drop the retained reference.

        Returns:
            True if a reference was stored.
        """
        removed = self._storage.remove(RETAINED_ENTRY_KEY)
        if removed:
            logger.info("Forgot retained entry")
        return removed

    def _drop_on_revoke(self, handle: EntryHandle, token: str) -> None:
        def drop() -> None:
            # A later retain may have replaced this reference already.
            reference = self.retained()
            if reference is not None and reference.token == token:
                self.forget()

        handle.on_revoke(drop)
