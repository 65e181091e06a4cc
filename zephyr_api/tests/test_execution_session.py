"""
Tests for the execution session: composition, history recording and
discarding superseded results.
"""

import asyncio

import httpx
import pytest

from zephyr_api.exceptions import (
    InvalidMethodError,
    InvalidUrlError,
    MalformedRequestBodyError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from zephyr_api.schemas.execute import ExecuteErrorResponse
from zephyr_api.services.execution_session import ExecutionSession, raise_for_error
from zephyr_api.services.history_store import HistoryStore
from zephyr_api.services.storage import InMemoryStorage
from zephyr_api.tests.factories import FailingStorage, RecordingTransport, make_draft


class GatedTransport(httpx.AsyncBaseTransport):
    """Holds requests to /slow until released."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.paths: list[str] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        if request.url.path == "/slow":
            self.started.set()
            await self.release.wait()
        return httpx.Response(200, json={"path": request.url.path})


class TestSubmit:
    """Completed executions are returned and recorded."""

    def test_success_is_recorded(self, store):
        transport = RecordingTransport(lambda r: httpx.Response(201, json={"id": 7}))
        session = ExecutionSession(history=store, transport=transport)

        result = asyncio.run(session.submit(make_draft(
            method="POST", body=[("name", "Ada")], query=[("dry", "1")],
        )))

        assert result.response.status_code == 201
        assert result.response.body == {"id": 7}
        assert result.request.body == {"name": "Ada"}
        assert result.warnings == []
        assert len(store) == 1
        entry = store.entries[0]
        assert entry.id == result.history_id
        assert entry.response.success is True
        assert entry.request.method == "POST"

    def test_http_error_status_is_recorded_as_failure(self, store):
        transport = RecordingTransport(lambda r: httpx.Response(500, text="boom"))
        session = ExecutionSession(history=store, transport=transport)

        result = asyncio.run(session.submit(make_draft()))

        assert result.response.status_code == 500
        assert result.response.body == "boom"
        assert store.entries[0].response.success is False

    def test_101_executions_keep_2_through_101(self, store):
        transport = RecordingTransport()
        session = ExecutionSession(history=store, transport=transport)

        async def run_all():
            return [
                await session.submit(make_draft(url=f"https://x.test/{i}"))
                for i in range(1, 102)
            ]

        results = asyncio.run(run_all())

        assert len(store) == 100
        assert [e.id for e in store.entries] == [r.history_id for r in reversed(results[1:])]
        assert store.entries[-1].request.url == "https://x.test/2"
        assert store.entries[0].request.url == "https://x.test/101"

    def test_works_without_history(self):
        session = ExecutionSession(transport=RecordingTransport())
        result = asyncio.run(session.submit(make_draft()))
        assert result.history_id is None

    def test_persistence_failure_becomes_a_warning(self):
        store = HistoryStore(FailingStorage())
        session = ExecutionSession(history=store, transport=RecordingTransport())

        result = asyncio.run(session.submit(make_draft()))

        assert result.response.status_code == 200
        assert len(result.warnings) == 1
        assert "disk full" in result.warnings[0]


class TestFailures:
    """Nothing is recorded for requests that did not complete."""

    def test_malformed_raw_body_never_executes(self, store):
        transport = RecordingTransport()
        session = ExecutionSession(history=store, transport=transport)

        with pytest.raises(MalformedRequestBodyError):
            asyncio.run(session.submit(make_draft(method="POST", body_mode="raw", raw_body='{"a":1')))

        assert transport.requests == []
        assert len(store) == 0

    def test_validation_errors_are_raised(self, store):
        session = ExecutionSession(history=store, transport=RecordingTransport())

        with pytest.raises(InvalidMethodError):
            asyncio.run(session.submit(make_draft(method="FETCH")))
        with pytest.raises(InvalidUrlError):
            asyncio.run(session.submit(make_draft(url="")))
        assert len(store) == 0

    def test_network_error_is_not_recorded(self, store):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        session = ExecutionSession(history=store, transport=RecordingTransport(handler))

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(session.submit(make_draft()))

        assert "name resolution failed" in exc_info.value.detail
        assert exc_info.value.category == "transport"
        assert len(store) == 0

    def test_timeout_is_not_recorded(self, store):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        session = ExecutionSession(history=store, transport=RecordingTransport(handler))

        with pytest.raises(RequestTimeoutError):
            asyncio.run(session.submit(make_draft()))
        assert len(store) == 0

    @pytest.mark.parametrize("error_type, exc_class", [
        ("invalid_method", InvalidMethodError),
        ("invalid_url", InvalidUrlError),
        ("network_error", NetworkError),
        ("timeout", RequestTimeoutError),
        ("cancelled", RequestCancelledError),
    ])
    def test_raise_for_error(self, error_type, exc_class):
        with pytest.raises(exc_class):
            raise_for_error(ExecuteErrorResponse(error="e", error_type=error_type))


class TestCancellation:
    """Superseded or cancelled results are discarded."""

    def test_newer_submission_supersedes_older(self):
        store = HistoryStore(InMemoryStorage())

        async def scenario():
            transport = GatedTransport()
            session = ExecutionSession(history=store, transport=transport)

            slow = asyncio.create_task(session.submit(make_draft(url="https://x.test/slow")))
            await transport.started.wait()

            fast = await session.submit(make_draft(url="https://x.test/fast"))
            transport.release.set()

            with pytest.raises(RequestCancelledError):
                await slow
            return fast

        fast = asyncio.run(scenario())

        assert fast.response.body == {"path": "/fast"}
        assert [e.request.url for e in store.entries] == ["https://x.test/fast"]

    def test_cancel_discards_outstanding_result(self):
        store = HistoryStore(InMemoryStorage())

        async def scenario():
            transport = GatedTransport()
            session = ExecutionSession(history=store, transport=transport)

            pending = asyncio.create_task(session.submit(make_draft(url="https://x.test/slow")))
            await transport.started.wait()
            session.cancel()
            transport.release.set()

            with pytest.raises(RequestCancelledError):
                await pending

        asyncio.run(scenario())
        assert len(store) == 0

    def test_generation_advances_per_submission(self):
        session = ExecutionSession(transport=RecordingTransport())
        assert session.generation == 0
        asyncio.run(session.submit(make_draft()))
        assert session.generation == 1
        assert session.is_current(1)
        session.cancel()
        assert not session.is_current(1)
