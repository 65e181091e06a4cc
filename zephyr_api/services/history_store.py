"""
Bounded, persisted request history.

The log is ordered most-recent-first and capped at a fixed size;
appending beyond the cap evicts the oldest entry. The whole log is
written back to storage after every mutation. Storage failures are
logged and recorded on ``last_error`` but never raised to callers, so
a completed request is always returned even if history is lost.
"""

import json
import logging
import secrets
import threading
import time

from ..config import HISTORY_MAX_ENTRIES, HISTORY_STORAGE_KEY
from ..exceptions import PersistenceError
from ..schemas.execute import ResponseEnvelope
from ..schemas.history import HistoryEntry, ResponseSummary
from ..schemas.request import KeyValuePair, RequestDraft, RequestSnapshot
from .storage import KeyValueStorage


logger = logging.getLogger(__name__)


def base_url(url: str) -> str:
    """URL without its query string or fragment."""
    return url.split("#", 1)[0].split("?", 1)[0]


def new_entry_id(timestamp_ms: int) -> str:
    return f"{timestamp_ms}-{secrets.token_hex(4)}"


def build_history_entry(
    draft: RequestDraft,
    response: ResponseEnvelope,
    timestamp_ms: int | None = None
) -> HistoryEntry:
    """
    Pair a draft with the outcome of executing it.

    Args:
        draft: Form state the request was composed from
        response: Envelope returned by the executor
        timestamp_ms: Creation time, defaults to now

    Returns:
        A new immutable history entry
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return HistoryEntry(
        id=new_entry_id(timestamp_ms),
        timestamp=timestamp_ms,
        request=RequestSnapshot.from_draft(draft),
        response=ResponseSummary.from_status(response.status_code, response.duration_ms),
    )


def _rows(rows: tuple[KeyValuePair, ...]) -> list[KeyValuePair]:
    return list(rows) if rows else [KeyValuePair()]


def restore(entry: HistoryEntry) -> RequestDraft:
    """
    Rebuild form state from a history entry.

    Every row list has at least one row so the form never renders
    empty.
    """
    snapshot = entry.request
    return RequestDraft(
        method=snapshot.method,
        url=snapshot.url,
        query_params=_rows(snapshot.query_params),
        headers=_rows(snapshot.headers),
        body_mode=snapshot.body_mode,
        body_params=_rows(snapshot.body_params),
        raw_body=snapshot.raw_body,
    )


class HistoryStore:
    """
    Ordered, bounded log of history entries.

    Loads once on construction and replaces the stored JSON array on
    every append or clear. Mutations are serialized by a lock.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        max_entries: int = HISTORY_MAX_ENTRIES,
        storage_key: str = HISTORY_STORAGE_KEY
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.storage = storage
        self.max_entries = max_entries
        self.storage_key = storage_key
        self.last_error: str | None = None
        self._lock = threading.Lock()
        self._entries: list[HistoryEntry] = self._load()

    def _load(self) -> list[HistoryEntry]:
        try:
            raw = self.storage.get(self.storage_key)
            if raw is None:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            entries = [HistoryEntry.model_validate(item) for item in data]
        except PersistenceError as e:
            self._record_error(f"Could not load history: {e.detail}")
            return []
        except ValueError as e:
            self._record_error(f"Stored history is unreadable, starting empty: {e}")
            return []

        logger.debug("Loaded %d history entries", len(entries))
        return entries[:self.max_entries]

    def _record_error(self, message: str) -> None:
        logger.error(message)
        self.last_error = message

    def _persist(self, entries: list[HistoryEntry]) -> bool:
        payload = json.dumps([entry.model_dump(mode="json") for entry in entries])
        try:
            self.storage.set(self.storage_key, payload)
        except PersistenceError as e:
            logger.exception("Failed to save history")
            self.last_error = f"History could not be saved: {e.detail}"
            return False
        self.last_error = None
        return True

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: HistoryEntry) -> None:
        """Prepend an entry, evict past the cap and persist the log."""
        with self._lock:
            entries = [entry, *self._entries][:self.max_entries]
            self._entries = entries
            self._persist(entries)

    def clear(self) -> None:
        """Remove every entry and persist the empty log."""
        with self._lock:
            self._entries = []
            self._persist([])
        logger.info("History cleared")

    def search(self, query: str = "") -> list[HistoryEntry]:
        """
        Filter entries by method or base URL.

        Matching is a case-insensitive substring test; a blank query
        returns the whole log. Order is most-recent-first.
        """
        needle = query.strip().lower()
        entries = self.entries
        if not needle:
            return entries
        return [
            entry for entry in entries
            if needle in base_url(entry.request.url).lower()
            or needle in entry.request.method.lower()
        ]

    def get(self, entry_id: str) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def restore(self, entry: HistoryEntry) -> RequestDraft:
        return restore(entry)
