"""
Recent-resource tracker: a persisted, capacity-bounded, deduplicated list of opened
locations, most-recent-first, each backed by an AccessCapability.

The whole list lives in one key-value slot as a JSON list of {"key", "token"} records
(token base64-encoded). Every mutation is a full read-modify-write of that slot under
a single-writer lock; readers use the last committed snapshot. Recency tracking is
best-effort: failures are logged and never reach the caller.
"""
import base64
import binascii
import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .capability import AccessCapability, CapabilityProvider, Location, normalize_location
from .config import RECENTS_CAPACITY, RECENTS_SETTINGS_KEY, RECENTS_UPDATED
from .event_bus import EventBus
from .exceptions import CapabilityCreationError, PersistenceError, StaleCapabilityError
from .logger import get_logger
from .storage import KeyValueStorage

logger = get_logger("recents")


@dataclass(frozen=True)
class RecentEntry:
    key: str
    capability: AccessCapability


def encode_entries(entries: Iterable[RecentEntry]) -> str:
    """Serialize entries, most-recent-first, to the persisted slot format."""
    records = [
        {"key": e.key, "token": base64.b64encode(e.capability.token).decode("ascii")}
        for e in entries
    ]
    return json.dumps(records)


def decode_entries(blob: str) -> List[RecentEntry]:
    """
    Parse the persisted slot. Raises PersistenceError if the blob is not a JSON list;
    individual malformed records are skipped.
    """
    try:
        records = json.loads(blob)
    except ValueError as e:
        raise PersistenceError(f"Recents slot is not valid JSON: {e}") from e
    if not isinstance(records, list):
        raise PersistenceError("Recents slot is not a list")
    entries = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        key = rec.get("key")
        token = rec.get("token")
        if not isinstance(key, str) or not isinstance(token, str):
            continue
        try:
            raw = base64.b64decode(token.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError):
            logger.debug("Skipping recent %s: token is not base64", key)
            continue
        entries.append(RecentEntry(key, AccessCapability(key=key, token=raw)))
    return entries


class RecentsStore:
    """
    Owns the recents sequence. Construct once at startup with injected storage,
    capability provider and event bus, and share the instance.

    Invariants: keys are unique (re-recording moves an entry to the front) and the
    sequence never exceeds capacity (overflow drops the oldest entries).
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        capabilities: CapabilityProvider,
        event_bus: Optional[EventBus] = None,
        capacity: int = RECENTS_CAPACITY,
        settings_key: str = RECENTS_SETTINGS_KEY,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1, got %r" % capacity)
        self._storage = storage
        self._capabilities = capabilities
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._capacity = capacity
        self._settings_key = settings_key
        self._lock = threading.RLock()
        self._snapshot: Optional[Tuple[RecentEntry, ...]] = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def settings_key(self) -> str:
        return self._settings_key

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    # -- reads -------------------------------------------------------------

    def list(self) -> List[Path]:
        """
        Current locations, most-recent-first. Entries whose capability no longer
        resolves are skipped (they stay persisted until removed or evicted), and
        duplicates by normalized location keep the first occurrence.
        """
        seen = set()
        out = []
        for entry in self._entries_snapshot():
            try:
                resolved = self._capabilities.resolve(entry.capability)
            except StaleCapabilityError as e:
                logger.debug("Skipping stale recent %s: %s", entry.key, e)
                continue
            key = normalize_location(resolved)
            if key in seen:
                continue
            seen.add(key)
            out.append(resolved)
        return out

    def entries(self) -> List[RecentEntry]:
        """Raw persisted entries, stale ones included."""
        return list(self._entries_snapshot())

    def reload(self) -> None:
        """Drop the cached snapshot; the next read loads the slot again."""
        with self._lock:
            self._snapshot = None

    # -- mutations ---------------------------------------------------------

    def record_opened(self, location: Location) -> bool:
        """Move location to the front of the list. Returns False if nothing was recorded."""
        try:
            capability = self._capabilities.create(location)
        except CapabilityCreationError as e:
            logger.warning("Not recording recent %s: %s", location, e)
            return False
        entry = RecentEntry(capability.key, capability)

        def change(entries: List[RecentEntry]) -> List[RecentEntry]:
            entries = [e for e in entries if e.key != entry.key]
            entries.insert(0, entry)
            if len(entries) > self._capacity:
                logger.debug("Evicting %d recent(s) past capacity %d", len(entries) - self._capacity, self._capacity)
            return entries[: self._capacity]

        return self._mutate("record", change)

    def remove(self, locations: Iterable[Location]) -> List[Path]:
        """Drop every entry matching one of locations by key or resolved path. Returns list()."""
        targets = {normalize_location(loc) for loc in locations}
        if targets:

            def change(entries: List[RecentEntry]) -> Optional[List[RecentEntry]]:
                kept = [e for e in entries if not self._matches(e, targets)]
                return kept if len(kept) != len(entries) else None

            self._mutate("remove", change)
        return self.list()

    def clear(self) -> bool:
        return self._mutate("clear", lambda entries: [] if entries else None)

    # -- internals ---------------------------------------------------------

    def _matches(self, entry: RecentEntry, targets: set) -> bool:
        if entry.key in targets:
            return True
        try:
            resolved = self._capabilities.resolve(entry.capability)
        except StaleCapabilityError:
            return False
        return normalize_location(resolved) in targets

    def _read_slot(self) -> List[RecentEntry]:
        """Load the persisted slot. Storage errors propagate; a corrupt blob reads as empty."""
        return self._load_slot()[0]

    def _load_slot(self) -> Tuple[List[RecentEntry], bool]:
        """Entries plus whether the slot was damaged (unparseable blob) and needs rewriting."""
        blob = self._storage.get(self._settings_key)
        if not blob:
            return [], False
        try:
            return decode_entries(blob), False
        except PersistenceError as e:
            logger.warning("Discarding unreadable recents slot %r: %s", self._settings_key, e)
            return [], True

    def _entries_snapshot(self) -> Tuple[RecentEntry, ...]:
        snap = self._snapshot
        if snap is not None:
            return snap
        with self._lock:
            if self._snapshot is None:
                try:
                    self._snapshot = tuple(self._read_slot())
                except PersistenceError as e:
                    logger.warning("Recents unavailable: %s", e)
                    return ()
            return self._snapshot

    def _mutate(
        self,
        action: str,
        change: Callable[[List[RecentEntry]], Optional[List[RecentEntry]]],
    ) -> bool:
        """
        Read-modify-write of the slot under the writer lock. change returns the new
        sequence, or None when nothing changed (no write, no notification).
        A damaged slot or unreadable backing store counts as empty and is always
        rewritten, so the next record_opened() or clear() repairs it.
        """
        with self._lock:
            try:
                current, damaged = self._load_slot()
            except PersistenceError as e:
                logger.warning("Recents %s starting from an empty list: %s", action, e)
                current, damaged = [], True
            updated = change(list(current))
            if updated is None:
                if not damaged:
                    self._snapshot = tuple(current)
                    return False
                updated = current
            try:
                self._storage.set(self._settings_key, encode_entries(updated))
            except PersistenceError as e:
                logger.warning("Recents %s not saved: %s", action, e)
                return False
            self._snapshot = tuple(updated)
        self._event_bus.emit(RECENTS_UPDATED)
        return True
