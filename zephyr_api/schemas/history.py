"""
Pydantic schemas for request execution history.

History entries are immutable: they pair a snapshot of the composed
request with a compact outcome summary. Full response headers and
bodies are not retained.
"""

from pydantic import BaseModel, ConfigDict

from .request import RequestSnapshot


class ResponseSummary(BaseModel):
    """Outcome of an execution, enough to render a history row."""
    status_code: int
    duration_ms: int
    success: bool

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_status(cls, status_code: int, duration_ms: int) -> "ResponseSummary":
        return cls(status_code=status_code, duration_ms=duration_ms, success=status_code < 400)


class HistoryEntry(BaseModel):
    """
    Schema for one history record.

    Attributes:
        id: Unique identifier, epoch milliseconds plus a random suffix
        timestamp: Creation time in milliseconds since the epoch
        request: Snapshot of the request as composed in the form
        response: Status, duration and success flag of the execution
    """
    id: str
    timestamp: int
    request: RequestSnapshot
    response: ResponseSummary

    model_config = ConfigDict(frozen=True)


class HistoryListResponse(BaseModel):
    """Schema for history list response."""
    items: list[HistoryEntry]
    total: int
