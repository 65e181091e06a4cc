"""
Execution session tying composition, execution and history together.

A session owns a generation counter. Each submission takes a new
generation before it is dispatched; a result that arrives after a
newer submission (or after ``cancel``) is discarded and no history
entry is written for it.
"""

import logging
import threading

import httpx

from ..exceptions import (
    APIException,
    InvalidHeaderError,
    InvalidMethodError,
    InvalidUrlError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from ..schemas.execute import ExecuteErrorResponse, ExecuteResult
from ..schemas.request import RequestDraft
from .history_store import HistoryStore, build_history_entry
from .http_executor import DEFAULT_TIMEOUT, execute_request
from .request_builder import compose_request


logger = logging.getLogger(__name__)


_ERROR_TYPE_TO_EXCEPTION = {
    "invalid_method": InvalidMethodError,
    "invalid_url": InvalidUrlError,
    "invalid_header": InvalidHeaderError,
    "network_error": NetworkError,
    "timeout": RequestTimeoutError,
    "cancelled": RequestCancelledError,
}


def raise_for_error(error: ExecuteErrorResponse) -> None:
    """Raise the API exception matching an execution error."""
    exc_class = _ERROR_TYPE_TO_EXCEPTION.get(error.error_type)
    detail = error.error if not error.details or error.details == error.error else f"{error.error}: {error.details}"
    if exc_class is None:
        raise APIException(detail)
    raise exc_class(detail)


class ExecutionSession:
    """
    Runs drafts through the executor and records completed ones.

    Args:
        history: Store that receives an entry for each completed request
        timeout: Request timeout in seconds
        transport: Optional httpx transport passed to the executor
    """

    def __init__(
        self,
        history: HistoryStore | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.history = history
        self.timeout = timeout
        self.transport = transport
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> None:
        """Invalidate whatever request is outstanding."""
        self._next_generation()

    async def submit(self, draft: RequestDraft) -> ExecuteResult:
        """
        Compose, execute and record a draft.

        Raises:
            MalformedRequestBodyError: Raw body is not JSON; nothing is sent
            ValidationError: Method, URL or headers are invalid
            NetworkError, RequestTimeoutError: The transport failed
            RequestCancelledError: A newer submission superseded this one
        """
        description = compose_request(draft)
        generation = self._next_generation()

        result = await execute_request(description, timeout=self.timeout, transport=self.transport)

        if not self.is_current(generation):
            logger.info("Discarding result of superseded request #%d", generation)
            raise RequestCancelledError()

        if isinstance(result, ExecuteErrorResponse):
            raise_for_error(result)

        warnings: list[str] = []
        history_id = None
        if self.history is not None:
            entry = build_history_entry(draft, result)
            self.history.append(entry)
            history_id = entry.id
            if self.history.last_error:
                warnings.append(self.history.last_error)

        return ExecuteResult(
            request=description,
            response=result,
            history_id=history_id,
            warnings=warnings,
        )
