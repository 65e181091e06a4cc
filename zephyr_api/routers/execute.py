"""
Request execution API routes.

Provides endpoints for executing a composed request, cancelling the
outstanding one, querying the request builder tabs, and exporting a
response. Completed executions are recorded in history.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, Response

from ..dependencies import get_execution_session
from ..exceptions import ErrorResponse, RequestCancelledError
from ..schemas.execute import ExecuteResult, ResponseEnvelope, TabState
from ..schemas.request import RequestDraft
from ..services.execution_session import ExecutionSession
from ..services.export import ExportFormat, ExportShape, export_response
from ..services.request_builder import DEFAULT_REQUEST_TAB, active_tab, request_tabs


router = APIRouter(prefix="/api", tags=["execute"])


@router.post(
    "/execute",
    response_model=ExecuteResult,
    responses={
        204: {"description": "Superseded by a newer request or cancelled; nothing to show"},
        400: {"model": ErrorResponse, "description": "Malformed JSON body"},
        422: {"model": ErrorResponse, "description": "Invalid method, URL or header"},
        502: {"model": ErrorResponse, "description": "Network error"},
        504: {"model": ErrorResponse, "description": "Request timeout"},
    }
)
async def execute(
    draft: RequestDraft,
    session: ExecutionSession = Depends(get_execution_session)
):
    """
    Execute a request composed from form state.

    Rows with blank keys are dropped and the body is resolved from the
    draft's body mode. Any HTTP status is a successful execution and is
    recorded in history; validation and transport failures are not.
    A result that was superseded or cancelled is dropped with an empty
    204 response.

    Args:
        draft: Form-shaped request state
        session: Execution session

    Returns:
        ExecuteResult with the sent request, the response envelope, the
        history entry id and any warnings
    """
    try:
        return await session.submit(draft)
    except RequestCancelledError:
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/execute/cancel", status_code=status.HTTP_204_NO_CONTENT)
def cancel_execution(session: ExecutionSession = Depends(get_execution_session)):
    """Discard the result of the outstanding request when it arrives."""
    session.cancel()
    return None


@router.get("/tabs", response_model=TabState)
def get_tabs(method: str, requested: str = DEFAULT_REQUEST_TAB):
    """
    Request builder tabs for a method and the tab that should be active.

    Args:
        method: HTTP method selected in the form
        requested: Tab the client currently shows
    """
    return TabState(tabs=request_tabs(method), active=active_tab(method, requested))


@router.post("/export")
def export(
    response: ResponseEnvelope,
    shape: ExportShape = "body",
    format: ExportFormat = "json"
):
    """
    Serialize a response for saving to a file.

    Args:
        response: Response envelope to export
        shape: "body" for the body alone, "full" to include status,
            headers and duration
        format: "json" for pretty-printed JSON, "text" for plain text
    """
    content = export_response(response, shape=shape, fmt=format)
    if format == "text":
        return PlainTextResponse(content)
    return Response(content=content, media_type="application/json")
