"""
Pydantic schemas for composing HTTP requests.

Defines the form-shaped draft a client edits, the immutable snapshot
kept in history, and the normalized description handed to the executor.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# HTTP methods supported by the system
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

SUPPORTED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

# Methods whose body is serialized onto the outbound request
BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})

# Strategies for assembling a request body from form input
BodyMode = Literal["form", "raw"]


class KeyValuePair(BaseModel):
    """A single key/value row: query parameter, header or form body field."""
    key: str = ""
    value: str = ""

    model_config = ConfigDict(frozen=True)

    def is_blank(self) -> bool:
        return not self.key.strip()


def _empty_rows() -> list[KeyValuePair]:
    return [KeyValuePair()]


class RequestDraft(BaseModel):
    """
    Form-shaped request state as a client edits it.

    Rows may have blank keys and the raw body may be invalid JSON; both
    are resolved when the draft is composed into a RequestDescription.
    """
    method: str = "GET"
    url: str = ""
    query_params: list[KeyValuePair] = Field(default_factory=_empty_rows)
    headers: list[KeyValuePair] = Field(default_factory=_empty_rows)
    body_mode: BodyMode = "form"
    body_params: list[KeyValuePair] = Field(default_factory=_empty_rows)
    raw_body: str = ""


class RequestSnapshot(BaseModel):
    """Immutable copy of a draft as it was sent, with blank rows removed."""
    method: str
    url: str
    query_params: tuple[KeyValuePair, ...] = ()
    headers: tuple[KeyValuePair, ...] = ()
    body_mode: BodyMode = "form"
    body_params: tuple[KeyValuePair, ...] = ()
    raw_body: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_draft(cls, draft: RequestDraft) -> "RequestSnapshot":
        return cls(
            method=draft.method,
            url=draft.url,
            query_params=tuple(p for p in draft.query_params if not p.is_blank()),
            headers=tuple(h for h in draft.headers if not h.is_blank()),
            body_mode=draft.body_mode,
            body_params=tuple(p for p in draft.body_params if not p.is_blank()),
            raw_body=draft.raw_body,
        )


class RequestDescription(BaseModel):
    """
    Normalized request handed to the executor.

    ``method`` is kept as a plain string; the executor validates it
    against SUPPORTED_METHODS itself.
    """
    method: str
    url: str
    headers: dict[str, str] = {}
    query_params: list[tuple[str, str]] = []
    body: Any | None = None


class JsonBodyValue(BaseModel):
    """Form body value that parsed as JSON."""
    kind: Literal["json"] = "json"
    value: Any

    model_config = ConfigDict(frozen=True)


class TextBodyValue(BaseModel):
    """Form body value kept as the literal text the user typed."""
    kind: Literal["text"] = "text"
    text: str

    model_config = ConfigDict(frozen=True)


BodyValue = JsonBodyValue | TextBodyValue
