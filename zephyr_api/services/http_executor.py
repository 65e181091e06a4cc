"""
HTTP execution service for sending HTTP requests.

This service validates a normalized request description, builds the
outbound call using httpx, measures the round trip and normalizes the
response into a uniform envelope. Transport failures are returned as
typed error responses rather than raised.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any
from urllib.parse import quote

import httpx

from ..config import REQUEST_TIMEOUT
from ..exceptions import (
    InvalidHeaderError,
    InvalidMethodError,
    InvalidUrlError,
    ValidationError,
)
from ..schemas.execute import ExecuteErrorResponse, ResponseEnvelope
from ..schemas.request import BODY_METHODS, SUPPORTED_METHODS, RequestDescription


logger = logging.getLogger(__name__)

# Default timeout in seconds
DEFAULT_TIMEOUT = REQUEST_TIMEOUT

# RFC 9110 token characters allowed in a header field name
HEADER_NAME_PATTERN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# RFC 9110 field-value: visible characters with inner spaces or tabs only.
# Non-ASCII characters are sent as UTF-8 and count as obs-text.
_FIELD_VCHAR = r"[\x21-\x7e\x80-\U0010ffff]"
HEADER_VALUE_PATTERN = re.compile(rf"(?:{_FIELD_VCHAR}+(?:[ \t]+{_FIELD_VCHAR}+)*)?")

_ERROR_CODE_TO_TYPE = {
    "INVALID_METHOD": "invalid_method",
    "INVALID_URL": "invalid_url",
    "INVALID_HEADER": "invalid_header",
}


def validate_method(method: str) -> None:
    if method not in SUPPORTED_METHODS:
        raise InvalidMethodError(
            f"Unsupported HTTP method: {method!r}. Expected one of {', '.join(SUPPORTED_METHODS)}"
        )


def validate_url(url: str) -> httpx.URL:
    """
    Check that a URL is absolute http(s) with a host.

    Returns:
        The parsed URL

    Raises:
        InvalidUrlError: If the URL is empty or not an absolute http(s) URL
    """
    if not url or not url.strip():
        raise InvalidUrlError("URL cannot be empty")

    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL as e:
        raise InvalidUrlError(f"Invalid URL: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(f"URL must start with http:// or https://, got {url!r}")
    if not parsed.host:
        raise InvalidUrlError(f"URL has no host: {url!r}")
    return parsed


def validate_headers(headers: dict[str, str]) -> None:
    for name, value in headers.items():
        if not HEADER_NAME_PATTERN.fullmatch(name):
            raise InvalidHeaderError(f"Invalid header name: {name!r}")
        if not HEADER_VALUE_PATTERN.fullmatch(value):
            raise InvalidHeaderError(
                f"Invalid value for header {name!r}: control characters and leading or trailing whitespace are not allowed"
            )


def validate_request(description: RequestDescription) -> None:
    """
    Validate a request description before any network I/O.

    Raises:
        InvalidMethodError, InvalidUrlError, InvalidHeaderError
    """
    validate_method(description.method)
    validate_url(description.url)
    validate_headers(description.headers)


def encode_query(query_params: list[tuple[str, str]]) -> str:
    """
    Percent-encode query pairs and join them in the given order.

    Every character other than ``A-Z a-z 0-9 - _ . ~`` is encoded, so
    raw text is always encoded exactly once.

    Example:
        >>> encode_query([("q", "a b"), ("x", "1&2")])
        'q=a%20b&x=1%262'
    """
    return "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}"
        for key, value in query_params
    )


def build_url(url: str, query_params: list[tuple[str, str]]) -> str:
    """
    Append an encoded query string to a base URL.

    Uses ``&`` when the base URL already carries a query string and
    keeps any fragment at the end.
    """
    url = url.strip()
    if not query_params:
        return url

    base, hash_mark, fragment = url.partition("#")
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{encode_query(query_params)}{hash_mark}{fragment}"


def has_header(headers: dict[str, Any], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


def prepare_body(
    method: str,
    body: Any | None,
    headers: dict[str, str]
) -> tuple[bytes | None, dict[str, str]]:
    """
    Serialize the body for payload methods.

    Args:
        method: Validated HTTP method
        body: JSON value to send, or None
        headers: Caller supplied headers

    Returns:
        Tuple of (encoded body or None, headers to send)
    """
    headers = dict(headers)
    if method not in BODY_METHODS or body is None:
        return None, headers

    content = json.dumps(body, ensure_ascii=False).encode("utf-8")
    if not has_header(headers, "Content-Type"):
        headers["Content-Type"] = "application/json"
    return content, headers


def encode_header_values(headers: dict[str, str]) -> dict[str, str | bytes]:
    """Pass ASCII values through and send anything else as UTF-8 bytes."""
    encoded: dict[str, str | bytes] = {}
    for name, value in headers.items():
        encoded[name] = value if value.isascii() else value.encode("utf-8")
    return encoded


def flatten_headers(headers: httpx.Headers) -> dict[str, str]:
    """
    Collapse response headers to one value per name.

    When a header is repeated, the last value wins.
    """
    flattened: dict[str, str] = {}
    for name, value in headers.multi_items():
        flattened[name] = value
    return flattened


def parse_response_body(text: str) -> Any:
    """
    Parse a response body as JSON, falling back to the raw text.

    Args:
        text: Decoded response body

    Returns:
        The parsed JSON value, or ``text`` unchanged if it is not JSON
    """
    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def error_from_validation(exc: ValidationError) -> ExecuteErrorResponse:
    return ExecuteErrorResponse(
        error=exc.detail,
        error_type=_ERROR_CODE_TO_TYPE.get(exc.error_code, "invalid_url"),
        details=exc.detail,
    )


async def execute_request(
    request: RequestDescription,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None
) -> ResponseEnvelope | ExecuteErrorResponse:
    """
    Execute an HTTP request and return the response.

    Args:
        request: The normalized request to execute
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used to route calls in tests

    Returns:
        ResponseEnvelope on any HTTP status, ExecuteErrorResponse on
        validation or transport failure
    """
    try:
        validate_request(request)
    except ValidationError as e:
        logger.info("Rejected %s request before dispatch: %s", request.method, e.detail)
        return error_from_validation(e)

    url = build_url(request.url, request.query_params)
    content, headers = prepare_body(request.method, request.body, request.headers)

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            outbound = client.build_request(
                method=request.method,
                url=url,
                headers=encode_header_values(headers),
                content=content,
            )
            logger.debug("Dispatching %s %s", request.method, url)

            start_time = time.perf_counter()
            # httpx timeouts apply per phase; the deadline bounds the whole exchange
            response = await asyncio.wait_for(client.send(outbound), timeout)
            end_time = time.perf_counter()

        duration_ms = max(0, int((end_time - start_time) * 1000))

    except (httpx.TimeoutException, asyncio.TimeoutError):
        logger.warning("%s %s timed out after %ss", request.method, url, timeout)
        return ExecuteErrorResponse(
            error="Request timed out",
            error_type="timeout",
            details=f"Request exceeded {timeout} seconds timeout"
        )
    except httpx.InvalidURL as e:
        return ExecuteErrorResponse(
            error="Invalid URL",
            error_type="invalid_url",
            details=str(e)
        )
    except httpx.ConnectError as e:
        logger.warning("Failed to connect for %s %s: %s", request.method, url, e)
        return ExecuteErrorResponse(
            error="Failed to connect to server",
            error_type="network_error",
            details=str(e)
        )
    except httpx.HTTPError as e:
        logger.warning("Network error for %s %s: %s", request.method, url, e)
        return ExecuteErrorResponse(
            error="Network error occurred",
            error_type="network_error",
            details=str(e)
        )

    logger.info("%s %s -> %s in %dms", request.method, url, response.status_code, duration_ms)

    return ResponseEnvelope(
        status_code=response.status_code,
        headers=flatten_headers(response.headers),
        body=parse_response_body(response.text),
        duration_ms=duration_ms,
    )
