"""Shared fixtures for syspass-cli tests."""

import json
import tempfile
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from syspass_cli.config import SyspassConfig
from syspass_cli.credentials import VaultSecret
from syspass_cli.transport import JsonRpcTransport
from syspass_cli.usage import UsageStore

HOST = "https://vault.example.com/api.php"


class FakeServer:
    """
    Scripted JSON-RPC endpoint for httpx.MockTransport.

    Each queued reply is either a JSON-serialisable body or an httpx.Response.
    Every request is recorded as its decoded JSON body.
    """

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.replies: list[Any] = []

    def reply(self, *bodies: Any) -> "FakeServer":
        self.replies.extend(bodies)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if not self.replies:
            raise AssertionError(f"Unexpected request: {self.requests[-1]['method']}")
        body = self.replies.pop(0)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)

    @property
    def methods(self) -> list[str]:
        return [request["method"] for request in self.requests]

    @property
    def last_params(self) -> dict[str, str]:
        return self.requests[-1]["params"]


@pytest.fixture
def config() -> SyspassConfig:
    """Configuration with token and vault password set."""
    return SyspassConfig(host=HOST, token="secret-token", password="vault-pass")


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def usage_store(temp_dir: Path) -> UsageStore:
    return UsageStore(temp_dir / "usage.json")


@pytest.fixture
def make_transport(config: SyspassConfig, server: FakeServer) -> Callable[..., JsonRpcTransport]:
    """Factory for transports talking to the fake server."""

    def factory(cfg: SyspassConfig | None = None, secret: VaultSecret | None = None) -> JsonRpcTransport:
        cfg = cfg or config
        http_client = httpx.Client(transport=httpx.MockTransport(server.handler))
        return JsonRpcTransport(cfg, secret or VaultSecret(cfg.password), http_client)

    return factory
