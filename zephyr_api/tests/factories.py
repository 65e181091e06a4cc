"""Builders for drafts, history entries and mock transports used in tests."""

import asyncio

import httpx

from zephyr_api.exceptions import PersistenceError
from zephyr_api.schemas.execute import ResponseEnvelope
from zephyr_api.schemas.request import KeyValuePair, RequestDraft
from zephyr_api.services.history_store import build_history_entry
from zephyr_api.services.storage import InMemoryStorage


def rows(pairs: list[tuple[str, str]] | None) -> list[KeyValuePair]:
    return [KeyValuePair(key=k, value=v) for k, v in (pairs or [("", "")])]


def make_draft(
    method: str = "GET",
    url: str = "https://api.example.com/items",
    query: list[tuple[str, str]] | None = None,
    headers: list[tuple[str, str]] | None = None,
    body_mode: str = "form",
    body: list[tuple[str, str]] | None = None,
    raw_body: str = "",
) -> RequestDraft:
    return RequestDraft(
        method=method,
        url=url,
        query_params=rows(query),
        headers=rows(headers),
        body_mode=body_mode,
        body_params=rows(body),
        raw_body=raw_body,
    )


def make_entry(
    url: str = "https://api.example.com/items",
    method: str = "GET",
    status_code: int = 200,
    timestamp_ms: int | None = None,
):
    return build_history_entry(
        make_draft(method=method, url=url),
        ResponseEnvelope(status_code=status_code, headers={}, body=None, duration_ms=12),
        timestamp_ms=timestamp_ms,
    )


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it receives."""

    def __init__(self, handler=None):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request):
            self.requests.append(request)
            if handler is None:
                return httpx.Response(200, json={"ok": True})
            return handler(request)

        super().__init__(record)


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk full")


class UnreadableStorage(InMemoryStorage):
    def get(self, key: str) -> str | None:
        raise PersistenceError("locked")


class LoopbackServer:
    """
    Raw HTTP/1.1 server on 127.0.0.1 that replies with fixed chunks.

    Used with ``httpx.AsyncHTTPTransport`` so requests go through the real
    connection pool and h11 instead of a mock transport.

    Args:
        chunks: Byte strings written in order after the request head is read
        delay: Seconds to wait after each chunk
    """

    def __init__(self, chunks: list[bytes], delay: float = 0.0):
        self.chunks = chunks
        self.delay = delay
        self.connections = 0
        self._writers: list[asyncio.StreamWriter] = []

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        self._writers.append(writer)
        try:
            await reader.readuntil(b"\r\n\r\n")
            for chunk in self.chunks:
                writer.write(chunk)
                await writer.drain()
                if self.delay:
                    await asyncio.sleep(self.delay)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    async def __aenter__(self) -> "LoopbackServer":
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        port = self._server.sockets[0].getsockname()[1]
        self.url = f"http://127.0.0.1:{port}/"
        return self

    async def __aexit__(self, *exc_info) -> None:
        for writer in self._writers:
            writer.close()
        self._server.close()
        await self._server.wait_closed()
