"""
History record API routes.

Provides endpoints for searching, restoring and clearing the request
history. History entries are created automatically when requests are
executed.
"""

from fastapi import APIRouter, Depends, status

from ..dependencies import get_history_store
from ..exceptions import ResourceNotFoundError
from ..schemas.history import HistoryEntry, HistoryListResponse
from ..schemas.request import RequestDraft
from ..services.history_store import HistoryStore


router = APIRouter(prefix="/api/history", tags=["history"])


def _get_entry_or_404(store: HistoryStore, entry_id: str) -> HistoryEntry:
    entry = store.get(entry_id)
    if entry is None:
        raise ResourceNotFoundError("History entry", entry_id)
    return entry


@router.get("", response_model=HistoryListResponse)
def list_history(q: str = "", store: HistoryStore = Depends(get_history_store)):
    """
    Get history entries, most recent first.

    Args:
        q: Case-insensitive filter on base URL or method; empty returns all
        store: History store

    Returns:
        HistoryListResponse with matching items and their count
    """
    items = store.search(q)
    return HistoryListResponse(items=items, total=len(items))


@router.get("/{entry_id}", response_model=HistoryEntry)
def get_history(entry_id: str, store: HistoryStore = Depends(get_history_store)):
    """
    Get a single history entry by ID.

    Raises:
        ResourceNotFoundError: 404 if the entry is not in the log
    """
    return _get_entry_or_404(store, entry_id)


@router.get("/{entry_id}/restore", response_model=RequestDraft)
def restore_history(entry_id: str, store: HistoryStore = Depends(get_history_store)):
    """
    Rebuild the form state an entry was executed from.

    Raises:
        ResourceNotFoundError: 404 if the entry is not in the log
    """
    return store.restore(_get_entry_or_404(store, entry_id))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_history(store: HistoryStore = Depends(get_history_store)):
    """
    Clear all history entries.

    Irreversible; clients are expected to confirm with the user first.
    """
    store.clear()
    return None
