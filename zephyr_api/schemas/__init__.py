"""
Pydantic schemas package.

Exports all schemas for API request/response validation.
"""

from .request import (
    HttpMethod,
    BodyMode,
    SUPPORTED_METHODS,
    BODY_METHODS,
    KeyValuePair,
    RequestDraft,
    RequestSnapshot,
    RequestDescription,
    JsonBodyValue,
    TextBodyValue,
    BodyValue,
)

from .execute import (
    ErrorType,
    ResponseEnvelope,
    ExecuteErrorResponse,
    ExecuteResult,
    TabState,
)

from .history import (
    ResponseSummary,
    HistoryEntry,
    HistoryListResponse,
)

__all__ = [
    # Request schemas
    "HttpMethod",
    "BodyMode",
    "SUPPORTED_METHODS",
    "BODY_METHODS",
    "KeyValuePair",
    "RequestDraft",
    "RequestSnapshot",
    "RequestDescription",
    "JsonBodyValue",
    "TextBodyValue",
    "BodyValue",
    # Execute schemas
    "ErrorType",
    "ResponseEnvelope",
    "ExecuteErrorResponse",
    "ExecuteResult",
    "TabState",
    # History schemas
    "ResponseSummary",
    "HistoryEntry",
    "HistoryListResponse",
]
