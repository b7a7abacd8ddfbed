"""
plugins/magic8ball/tests/conftest.py

Shared fixtures for 8ball plugin tests.
"""

import json
import random

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from magic8ball.providers.base import FetchError, FetchFailure, FetchOk, FortuneProvider
from magic8ball.providers.eightballapi import EightBallAPIProvider
from magic8ball.responses import Category, EightBallResponse
from magic8ball.service import EightBallService, FortuneContext


class FakeProvider(FortuneProvider):
    """Provider that returns a fixed result and records its calls."""

    def __init__(self, result=None):
        self.result = result or FetchError(FetchFailure.CONNECTION, "offline")
        self.unbiased_calls = 0
        self.biased_questions = []
        self.closed = False

    async def fetch_unbiased(self):
        self.unbiased_calls += 1
        return self.result

    async def fetch_biased(self, question):
        self.biased_questions.append(question)
        return self.result

    async def close(self):
        self.closed = True


@pytest.fixture
def make_provider():
    """Factory for fake providers returning a given result."""
    return FakeProvider


@pytest.fixture
def failing_provider():
    """Provider whose every fetch fails with a connection error."""
    return FakeProvider()


@pytest.fixture
def remote_response():
    """A response as the 8Ball API would produce it."""
    return EightBallResponse(reading="Outlook good", category=Category.POSITIVE, source="remote")


@pytest.fixture
def remote_provider(remote_response):
    """Provider whose every fetch succeeds."""
    return FakeProvider(FetchOk(remote_response))


@pytest.fixture
def make_service():
    """Factory for services with a seeded random source."""
    def _make_service(provider, seed=42):
        return EightBallService(FortuneContext(provider=provider, rng=random.Random(seed)))
    return _make_service


@pytest.fixture
def make_api_provider():
    """Factory for EightBallAPIProvider instances backed by an httpx mock transport."""
    def _make_api_provider(handler, base_url=EightBallAPIProvider.BASE_URL):
        client = httpx.AsyncClient(
            base_url=base_url,
            transport=httpx.MockTransport(handler),
        )
        return EightBallAPIProvider(base_url=base_url, client=client)
    return _make_api_provider


@pytest.fixture
def mock_nats():
    """Create a mock NATS client for testing."""
    nats = AsyncMock()
    nats.publish = AsyncMock()

    # Track subscriptions
    nats._subscriptions = []

    async def mock_subscribe(subject, cb=None):
        sub = MagicMock()
        sub.subject = subject
        sub.callback = cb
        sub.unsubscribe = AsyncMock()
        nats._subscriptions.append(sub)
        return sub

    nats.subscribe = mock_subscribe

    return nats


@pytest.fixture
def mock_message():
    """Factory for creating mock NATS messages."""
    def _make_message(data: dict, reply_to: str = None, subject: str = "launcher.test"):
        msg = MagicMock()
        msg.subject = subject
        msg.data = json.dumps(data).encode()
        msg.reply = reply_to
        return msg
    return _make_message
