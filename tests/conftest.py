"""Pytest configuration and fixtures."""

import asyncio
import json
import os
import tempfile
from pathlib import Path

import httpx
import pytest

from picmark.config.settings import PicmarkSettings

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Smallest valid PNG, enough for files that only need to exist
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Default settings, isolated from any picmark.yaml or PICMARK_ variable."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("PICMARK_"):
            monkeypatch.delenv(name)
    return PicmarkSettings()


@pytest.fixture
def make_image(tmp_path):
    """Create an image file relative to ``tmp_path``."""

    def _make(relative: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(PNG_BYTES)
        return path

    return _make


class FakeImageHost:
    """In-memory PicGo-style upload server for ``httpx.MockTransport``.

    Each uploaded path gets ``https://cdn.example.com/<name>``. Paths listed
    in ``failures`` map to a status code (or ``"reject"`` for a
    ``success: false`` body).
    """

    def __init__(self, failures: dict[str, int | str] | None = None) -> None:
        self.failures = failures or {}
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = json.loads(request.content)["list"][0]
        self.requests.append(path)

        failure = self.failures.get(Path(path).name)
        if failure == "reject":
            return httpx.Response(200, json={"success": False, "result": []})
        if isinstance(failure, int):
            return httpx.Response(failure, text="boom")

        return httpx.Response(
            200, json={"success": True, "result": [f"https://cdn.example.com/{Path(path).name}"]}
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def image_host():
    """A fresh fake image host."""
    return FakeImageHost()


class BarrierTransport(httpx.AsyncBaseTransport):
    """Holds every request until ``expected`` requests are in flight at once."""

    def __init__(self, expected: int) -> None:
        self.expected = expected
        self.in_flight = 0
        self.max_in_flight = 0
        self.all_arrived = asyncio.Event()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.in_flight >= self.expected:
            self.all_arrived.set()
        await self.all_arrived.wait()
        self.in_flight -= 1
        name = Path(json.loads(request.content)["list"][0]).name
        return httpx.Response(
            200, json={"success": True, "result": [f"https://cdn.example.com/{name}"]}
        )


@pytest.fixture
def barrier_transport():
    """Factory for a transport that only answers once N requests are in flight."""
    return BarrierTransport
