"""
Request composition service.

Turns form-shaped drafts into normalized request descriptions:
drops rows with blank keys, resolves body values, and parses raw JSON
bodies. Also derives which request builder tab a client should show.
"""

import json
from typing import Any

from ..exceptions import MalformedRequestBodyError
from ..schemas.request import (
    BODY_METHODS,
    BodyValue,
    JsonBodyValue,
    KeyValuePair,
    RequestDescription,
    RequestDraft,
    TextBodyValue,
)


REQUEST_TABS = ["query", "headers", "body"]
RESPONSE_TABS = ["body", "headers", "details"]
DEFAULT_REQUEST_TAB = "query"


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"{name} is not valid JSON")


def loads_strict(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def parse_body_value(text: str) -> BodyValue:
    """
    Resolve a form body field into a JSON value or literal text.

    Example:
        >>> parse_body_value("42")
        JsonBodyValue(kind='json', value=42)
        >>> parse_body_value("hello")
        TextBodyValue(kind='text', text='hello')
    """
    try:
        return JsonBodyValue(value=loads_strict(text))
    except ValueError:
        return TextBodyValue(text=text)


def body_value_to_json(value: BodyValue) -> Any:
    if isinstance(value, JsonBodyValue):
        return value.value
    return value.text


def valid_rows(rows: list[KeyValuePair]) -> list[KeyValuePair]:
    return [row for row in rows if not row.is_blank()]


def build_form_body(rows: list[KeyValuePair]) -> dict[str, Any] | None:
    """
    Assemble a JSON object from form rows.

    Returns None when no row has a key. Later rows overwrite earlier
    rows with the same key.
    """
    rows = valid_rows(rows)
    if not rows:
        return None
    return {row.key: body_value_to_json(parse_body_value(row.value)) for row in rows}


def parse_raw_body(raw_body: str) -> Any | None:
    """
    Parse a hand-typed JSON document.

    Raises:
        MalformedRequestBodyError: With the parser's message if the text
            is not valid JSON
    """
    if not raw_body.strip():
        return None
    try:
        return loads_strict(raw_body)
    except ValueError as e:
        raise MalformedRequestBodyError(f"Invalid JSON: {e}") from e


def compose_request(draft: RequestDraft) -> RequestDescription:
    """
    Normalize a draft into a request description.

    The body is only resolved for methods that carry one; a malformed
    raw body raises before anything is sent.
    """
    headers: dict[str, str] = {}
    for row in valid_rows(draft.headers):
        headers[row.key] = row.value

    body = None
    if draft.method in BODY_METHODS:
        if draft.body_mode == "raw":
            body = parse_raw_body(draft.raw_body)
        else:
            body = build_form_body(draft.body_params)

    return RequestDescription(
        method=draft.method,
        url=draft.url,
        headers=headers,
        query_params=[(row.key, row.value) for row in valid_rows(draft.query_params)],
        body=body,
    )


def request_tabs(method: str) -> list[str]:
    """Request builder tabs available for a method."""
    if method in BODY_METHODS:
        return list(REQUEST_TABS)
    return [tab for tab in REQUEST_TABS if tab != "body"]


def active_tab(method: str, requested_tab: str) -> str:
    """
    Tab to display for a method.

    Falls back to the query tab when the requested one is not
    available, e.g. the body tab after switching from POST to GET.
    """
    if requested_tab in request_tabs(method):
        return requested_tab
    return DEFAULT_REQUEST_TAB


def cycle_tab(tabs: list[str], current: str, step: int = 1) -> str:
    """Move ``step`` tabs from ``current``, wrapping around."""
    if not tabs:
        raise ValueError("tabs cannot be empty")
    if current not in tabs:
        return tabs[0]
    return tabs[(tabs.index(current) + step) % len(tabs)]
