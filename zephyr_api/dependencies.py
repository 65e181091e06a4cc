"""
FastAPI dependencies for the shared history store and execution session.

Both objects are created once in the application lifespan and kept on
``app.state``; tests replace them through ``app.dependency_overrides``.
"""

from fastapi import Request

from .services.execution_session import ExecutionSession
from .services.history_store import HistoryStore


def get_history_store(request: Request) -> HistoryStore:
    return request.app.state.history_store


def get_execution_session(request: Request) -> ExecutionSession:
    return request.app.state.execution_session
