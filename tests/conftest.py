"""Pytest configuration and fixtures for Luxor tests."""

import asyncio
import json

import pytest

from custom_components.luxor.luxor_api import LuxorController

IP_ADDRESS = "192.168.1.50"


class FakeResponse:
    def __init__(self, body: str):
        self._body = body

    async def text(self) -> str:
        return self._body


class FakeRequest:
    """Async context manager standing in for aiohttp's request context."""

    def __init__(self, reply):
        self._reply = reply

    async def __aenter__(self):
        delay = self._reply.get("delay", 0)
        if delay:
            await asyncio.sleep(delay)
        if "error" in self._reply:
            raise self._reply["error"]
        return FakeResponse(self._reply["body"])

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records POSTs and answers from per-endpoint reply queues.

    The last queued reply for an endpoint is repeated once the queue runs dry.
    """

    def __init__(self):
        self.calls = []
        self._replies = {}

    def reply(self, endpoint, status=0, delay=0, **fields):
        body = json.dumps({"Status": status, **fields})
        self._replies.setdefault(endpoint, []).append({"body": body, "delay": delay})

    def reply_raw(self, endpoint, body):
        self._replies.setdefault(endpoint, []).append({"body": body})

    def fail(self, endpoint, error):
        self._replies.setdefault(endpoint, []).append({"error": error})

    def calls_to(self, endpoint):
        return [payload for name, payload in self.calls if name == endpoint]

    def post(self, url, data=None, headers=None, timeout=None):
        endpoint = url.rsplit("/", 1)[-1]
        self.calls.append((endpoint, json.loads(data) if data else None))
        queue = self._replies.get(endpoint)
        if not queue:
            raise AssertionError(f"Unexpected request to {endpoint}")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return FakeRequest(reply)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def controller(session):
    return LuxorController(IP_ADDRESS, session)


@pytest.fixture
def group_list():
    """A ZDC style group list."""
    return [
        {"Name": "Garden", "GroupNumber": 1, "Intensity": 0, "Color": 0},
        {"Name": "Path", "GroupNumber": 2, "Intensity": 40, "Color": 12},
        {"Name": "Pool", "GroupNumber": 3, "Intensity": 100, "Color": 255},
    ]
