import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, unquote, urlsplit

import pytest

from config.console_config import ConsoleConfig
from database import DatabaseManager, SettingsService
from player_console.clients import GameLayerClient, TransportResponse
from player_console.models import Credentials
from player_console.services.credential_store import CredentialStore


def respond(payload: Any = None, status: int = 200) -> TransportResponse:
    text = json.dumps(payload) if payload is not None else ''
    return TransportResponse(status=status, json=payload, text=text)


@dataclass
class Call:
    method: str
    path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    body: Optional[Dict[str, Any]] = None


@dataclass
class FakeTransport:
    """
    Scripted transport keyed by (method, path) relative to the base URL.

    A route is either a TransportResponse or a handler taking the Call and
    returning one (sync or async, so a test can hold a response on an Event).
    Unrouted requests answer 404.
    """
    base_url: str
    routes: Dict[tuple, Any] = field(default_factory=dict)
    calls: List[Call] = field(default_factory=list)

    def add(self, method: str, path: str, payload: Any = None, status: int = 200, handler=None):
        self.routes[(method, path)] = handler or respond(payload, status)

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [c.path for c in self.calls if method is None or c.method == method]

    def count(self, method: str, path: str) -> int:
        return sum(1 for c in self.calls if c.method == method and c.path == path)

    async def request(self, method, url, headers, body=None) -> TransportResponse:
        parsed = urlsplit(url)
        prefix = urlsplit(self.base_url).path
        call = Call(
            method=method,
            path=unquote(parsed.path[len(prefix):]),
            query=dict(parse_qsl(parsed.query)),
            headers=dict(headers),
            body=body,
        )
        self.calls.append(call)

        route = self.routes.get((method, call.path))
        if route is None:
            return respond({"message": f"No route for {method} {call.path}"}, status=404)
        if callable(route):
            result = route(call)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        return route


class RecordingNotifier:
    def __init__(self):
        self.notifications = []

    def notify(self, kind: str, message: str) -> None:
        self.notifications.append((kind, message))

    def messages(self, kind: Optional[str] = None) -> List[str]:
        return [m for k, m in self.notifications if kind is None or k == kind]


@pytest.fixture
def config():
    return ConsoleConfig(
        base_url="https://api.gamelayer.test/api/v0",
        poll_interval_seconds=60,
        max_retries=1,
    )


@pytest.fixture
def transport(config):
    return FakeTransport(base_url=config.base_url)


@pytest.fixture
def client(transport, config):
    return GameLayerClient(transport=transport, config=config)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings(tmp_path):
    return SettingsService(DatabaseManager(f"sqlite:///{tmp_path / 'console.db'}"))


@pytest.fixture
def store(settings):
    return CredentialStore(settings)


@pytest.fixture
def credentials():
    return Credentials(account="acme", api_key="k1")


@pytest.fixture
def stored(store, credentials):
    store.set(credentials)
    return store


@pytest.fixture
def wait_until():
    async def wait(predicate, timeout: float = 1.0, step: float = 0.005):
        deadline = asyncio.get_running_loop().time() + timeout
        while not predicate():
            if asyncio.get_running_loop().time() > deadline:
                raise AssertionError("condition not reached in time")
            await asyncio.sleep(step)
    return wait
