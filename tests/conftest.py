# tests/conftest.py
import asyncio
import os
import sys
import logging
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

# Make sure `src/` is on the import path:
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
sys.path.insert(0, os.path.join(ROOT, "src"))

from config.sync_config import HostConfig, NotifyConfig, SyncConfig, SyncOptions, SyncOptionsV6  # noqa: E402

V6_LOGIN_RESPONSE = {
    "session": {
        "valid": True,
        "totp": False,
        "sid": "IEFZjjlRXX0FMaemtB8opQ=",
        "csrf": "+Y5Qx4Qxa5XXYSzz8Nu7gw=",
        "validity": 1800,
        "message": "app-password correct",
    },
    "took": 0.07,
}
GRAVITY_EVENT_STREAM = "[✓] TCP (IPv6)\n[✓] Pi-hole blocking is enabled\n[✓] Done"


class FakePiHole:
    """Scripted Pi-hole served by an aiohttp TestServer.

    Each ``(method, path)`` route answers from a queue of responses; the last
    queued response keeps being served once the queue runs dry.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[web.Response]] = {}
        self.requests: List[Tuple[str, str, dict, bytes]] = []
        self.delays: Dict[Tuple[str, str], float] = {}
        self.server: Optional[TestServer] = None

    def reply(self, method: str, path: str, *responses) -> "FakePiHole":
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def slow(self, method: str, path: str, seconds: float) -> "FakePiHole":
        """Hold every answer on a route for ``seconds`` before sending it."""
        self.delays[(method, path)] = seconds
        return self

    def calls(self, method: str, path: str) -> List[Tuple[dict, bytes]]:
        return [(headers, body) for m, p, headers, body in self.requests if (m, p) == (method, path)]

    async def handle(self, request: web.Request) -> web.Response:
        key = (request.method, request.path_qs)
        if key not in self.routes:
            key = (request.method, request.path)
        body = await request.read()
        self.requests.append((request.method, key[1], dict(request.headers), body))

        if key in self.delays:
            await asyncio.sleep(self.delays[key])

        queue = self.routes.get(key)
        if not queue:
            return web.Response(status=404, text="not found")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        return _copy(response)

    @property
    def base_url(self) -> str:
        return f"http://{self.server.host}:{self.server.port}"


def _copy(response: web.Response) -> web.Response:
    return web.Response(
        status=response.status,
        body=response.body,
        headers={k: v for k, v in response.headers.items() if k.lower() != "content-length"},
    )


@pytest_asyncio.fixture
async def fake_pihole():
    """A running fake Pi-hole; routes are added by each test."""
    fake = FakePiHole()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    fake.server = TestServer(app)
    await fake.server.start_server()
    yield fake
    await fake.server.close()


@pytest.fixture
def quiet_logger():
    logger = logging.getLogger("tests.pihole_sync")
    logger.setLevel(logging.DEBUG)
    return logger


def make_config(
    secondary_count: int = 2,
    version: str = "6",
    update_gravity: bool = True,
    on_success: bool = False,
    on_failure: bool = True,
    retry_count: int = 5,
) -> SyncConfig:
    """Build a run configuration against the 10.0.0.x test network."""
    return SyncConfig(
        primary_host=HostConfig(base_url="http://10.0.0.2", password="password1"),
        secondary_hosts=tuple(
            HostConfig(base_url=f"http://10.0.0.{3 + i}", password=f"password{2 + i}")
            for i in range(secondary_count)
        ),
        pihole_version=version,
        update_gravity=update_gravity,
        run_once=True,
        notify=NotifyConfig(on_success=on_success, on_failure=on_failure),
        sync=SyncOptions(v6=SyncOptionsV6(gravity_update_retry_count=retry_count)),
    )
