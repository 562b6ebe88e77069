"""Entry handles and their retention.

Example:
    from scribe.entries import EntryStore, LocalStorage, PathPicker, PickKind

    store = EntryStore(LocalStorage("storage.json"), PathPicker("notes.json"))
    handle = await store.acquire(PickKind.OPEN, ["json"])
    store.retain(handle)
"""

from scribe.entries.handle import EntryHandle
from scribe.entries.picker import ConsolePicker, EntryPicker, PathPicker, PickKind
from scribe.entries.storage import LocalStorage, StorageData
from scribe.entries.store import RETAINED_ENTRY_KEY, EntryStore, RetainedReference

__all__ = [
    # Handles
    "EntryHandle",
    # Pickers
    "EntryPicker",
    "PathPicker",
    "ConsolePicker",
    "PickKind",
    # Storage
    "LocalStorage",
    "StorageData",
    # Store
    "EntryStore",
    "RetainedReference",
    "RETAINED_ENTRY_KEY",
]
