"""
Pydantic schemas for request execution.

Defines the uniform response envelope, the typed execution failure,
and the result returned to clients after a request completes.
"""

from typing import Any, Literal

from pydantic import BaseModel

from .request import RequestDescription


ErrorType = Literal[
    "invalid_method",
    "invalid_url",
    "invalid_header",
    "network_error",
    "timeout",
    "cancelled",
]

VALIDATION_ERROR_TYPES: frozenset[str] = frozenset({"invalid_method", "invalid_url", "invalid_header"})


class ResponseEnvelope(BaseModel):
    """
    Uniform success result of executing a request.

    ``headers`` holds one value per name; when the server repeats a
    header only the last value is kept. ``body`` is the parsed JSON
    document, or the raw text when the response is not JSON.
    """
    status_code: int
    headers: dict[str, str] = {}
    body: Any = None
    duration_ms: int


class ExecuteErrorResponse(BaseModel):
    """Schema for execution error response."""
    error: str
    error_type: ErrorType
    details: str | None = None

    @property
    def is_validation_error(self) -> bool:
        return self.error_type in VALIDATION_ERROR_TYPES


class ExecuteResult(BaseModel):
    """
    Schema for a completed execution.

    Carries the request as it was sent (shown in the "details" tab),
    the response envelope, the id of the history entry that was
    recorded and any non-blocking warnings.
    """
    request: RequestDescription
    response: ResponseEnvelope
    history_id: str | None = None
    warnings: list[str] = []


class TabState(BaseModel):
    """Request builder tabs available for a method and the one to show."""
    tabs: list[str]
    active: str
