"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from loguru import logger

from youtrack_hub.services.youtrack_client import YouTrackClient

from tests.factories import BASE_URL


@pytest.fixture()
def log_messages() -> list[str]:
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages  # type: ignore[misc]
    logger.remove(handler_id)


@pytest.fixture()
def make_client() -> Callable[..., YouTrackClient]:
    """Build a client whose HTTP traffic is served by the given handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> YouTrackClient:
        return YouTrackClient(
            BASE_URL,
            "perm:test-token",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Skip retry backoff, recording the requested delays."""
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("youtrack_hub.services.youtrack_client.asyncio.sleep", fake_sleep)
    return delays
