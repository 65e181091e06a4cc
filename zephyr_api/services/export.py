"""
Serializable shapes of a response for saving to a file.

Two shapes are offered: the body alone, or the body together with
status, headers and duration. Either can be rendered as pretty-printed
JSON or as plain text. Writing the file is left to the caller.
"""

import json
from typing import Any, Literal

from ..schemas.execute import ResponseEnvelope


ExportShape = Literal["body", "full"]
ExportFormat = Literal["json", "text"]


def body_only(response: ResponseEnvelope) -> Any:
    return response.body


def full_response(response: ResponseEnvelope) -> dict[str, Any]:
    return {
        "status_code": response.status_code,
        "headers": dict(response.headers),
        "body": response.body,
        "duration_ms": response.duration_ms,
    }


def render_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _render_body_text(body: Any) -> str:
    if isinstance(body, str):
        return body
    return render_json(body)


def render_text(response: ResponseEnvelope, shape: ExportShape = "body") -> str:
    """
    Render a response as plain text.

    The "full" shape starts with status and duration, then one
    ``Name: value`` line per header, a blank line and the body.
    """
    body = _render_body_text(response.body)
    if shape == "body":
        return body

    lines = [
        f"Status: {response.status_code}",
        f"Duration: {response.duration_ms} ms",
        "",
    ]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    lines.append("")
    lines.append(body)
    return "\n".join(lines)


def export_response(
    response: ResponseEnvelope,
    shape: ExportShape = "body",
    fmt: ExportFormat = "json"
) -> str:
    """Serialize a response in the requested shape and format."""
    if fmt == "text":
        return render_text(response, shape)
    value = body_only(response) if shape == "body" else full_response(response)
    return render_json(value)
