# Services package

from .http_executor import execute_request, build_url, validate_request
from .request_builder import compose_request, parse_body_value, active_tab, request_tabs, cycle_tab
from .history_store import HistoryStore, build_history_entry, restore
from .storage import InMemoryStorage, SqlKeyValueStorage
from .execution_session import ExecutionSession, raise_for_error
from .export import export_response

__all__ = [
    "execute_request",
    "build_url",
    "validate_request",
    "compose_request",
    "parse_body_value",
    "active_tab",
    "request_tabs",
    "cycle_tab",
    "HistoryStore",
    "build_history_entry",
    "restore",
    "InMemoryStorage",
    "SqlKeyValueStorage",
    "ExecutionSession",
    "raise_for_error",
    "export_response",
]
