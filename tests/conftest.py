"""Shared fixtures: a fake file server behind ``httpx.MockTransport``."""

from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from zencloud.client import StorageClient  # noqa: E402

BASE_URL = "http://files.test"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeServer:
    """Answers requests from a (method, path) route table and records them."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Responder] = {}

    def reply(self, method: str, path: str, status_code: int = 200, **kwargs) -> None:
        self.routes[(method, path)] = lambda _request: httpx.Response(status_code, **kwargs)

    def respond_with(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, text="not found")
        return responder(request)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def make_client(server: FakeServer, tmp_path) -> Callable[..., StorageClient]:
    """Build StorageClients wired to the fake server; all are closed after the test."""
    created: List[StorageClient] = []

    def factory(base_url: Optional[str] = None, **_kwargs) -> StorageClient:
        client = StorageClient(
            base_url=base_url or BASE_URL,
            transport=httpx.MockTransport(server.handler),
            http_log_path=str(tmp_path / "http.log"),
        )
        created.append(client)
        return client

    yield factory
    for client in created:
        client.close()


@pytest.fixture
def client(make_client) -> StorageClient:
    return make_client()


@pytest.fixture
def two_files() -> list:
    return [{"id": 1, "filename": "a.txt"}, {"id": 2, "filename": "b.txt"}]
