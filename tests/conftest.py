import asyncio
import json
import threading
import time
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

import pytest

from datalyr.errors import TransientDeliveryError
from datalyr.events.utils import create_event_record
from datalyr.transport import Transport, TransportResponse


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or timing")
    config.addinivalue_line("markers", "slow: tests that wait on real timers")


class SentRequest(NamedTuple):
    url: str
    headers: Dict[str, str]
    body: bytes

    @property
    def payload(self) -> Dict[str, Any]:
        return json.loads(self.body)


class FakeTransport(Transport):
    """
    In-memory transport answering with scripted statuses.

    ``statuses`` is consumed one per request, ``default_status`` answers the
    rest. ``error`` is raised instead of answering and ``delay`` stalls each
    request for that many seconds.
    """

    def __init__(
        self,
        statuses: Optional[List[int]] = None,
        default_status: int = 200,
        delay: float = 0.0,
        error: Optional[TransientDeliveryError] = None,
    ):
        self.statuses = list(statuses or [])
        self.default_status = default_status
        self.delay = delay
        self.error = error
        self.requests: List[SentRequest] = []
        self.closed = False
        self._lock = threading.Lock()

    async def send(
        self, url: str, headers: Mapping[str, str], body: bytes, timeout: float
    ) -> TransportResponse:
        with self._lock:
            self.requests.append(SentRequest(url, dict(headers), body))
            status = self.statuses.pop(0) if self.statuses else self.default_status

        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        text = "" if 200 <= status < 300 else f"status {status}"
        return TransportResponse(status_code=status, text=text)

    async def close(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [request.payload for request in self.requests]

    def wait_for_requests(self, count: int, timeout: float = 3.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.requests) >= count:
                    return True
            time.sleep(0.01)
        return False


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def make_record():
    def _make(event: str = "Viewed", user_id: Optional[str] = "user-1", **properties):
        return create_event_record(user_id, event, properties)

    return _make


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep
