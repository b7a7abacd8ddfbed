"""
plugins/magic8ball/tests/test_service.py

Tests for response orchestration: remote first, local fallback.
"""

import logging
import random
from collections import Counter
from unittest.mock import MagicMock

import httpx
import pytest

from magic8ball.providers.base import FetchError, FetchFailure, parse_payload
from magic8ball.responses import (
    CLASSIC_CATALOG,
    Category,
    EightBallResponse,
    Lean,
    ResponseSelector,
)
from magic8ball.service import EightBallService, FortuneContext


CLASSIC_READINGS = {entry.text: entry.category for entry in CLASSIC_CATALOG.all}


def assert_classic(response):
    """Response must be one of the 20 fortunes, with its own category."""
    assert response.source == "local"
    assert response.reading in CLASSIC_READINGS
    assert response.category is CLASSIC_READINGS[response.reading]


class TestFortuneContext:
    """Tests for the injected context."""

    def test_default_rng_per_context(self, failing_provider):
        ctx1 = FortuneContext(provider=failing_provider)
        ctx2 = FortuneContext(provider=failing_provider)
        assert isinstance(ctx1.rng, random.Random)
        assert ctx1.rng is not ctx2.rng

    def test_selector_uses_context_rng(self, failing_provider):
        rng = random.Random(1)
        service = EightBallService(FortuneContext(provider=failing_provider, rng=rng))
        assert service.selector.rng is rng


class TestRemoteSuccess:
    """Remote responses are returned untouched."""

    @pytest.mark.asyncio
    async def test_unbiased_uses_fetch_unbiased(self, remote_provider, remote_response, make_service):
        service = make_service(remote_provider)

        response = await service.get_response("Will it rain?", use_biased=False)

        assert response is remote_response
        assert remote_provider.unbiased_calls == 1
        assert remote_provider.biased_questions == []

    @pytest.mark.asyncio
    async def test_biased_uses_fetch_biased(self, remote_provider, remote_response, make_service):
        service = make_service(remote_provider)

        response = await service.get_response("Will it rain?", use_biased=True)

        assert response is remote_response
        assert remote_provider.biased_questions == ["Will it rain?"]
        assert remote_provider.unbiased_calls == 0

    @pytest.mark.asyncio
    async def test_unrecognized_remote_type_passes_through(self, make_provider, make_service):
        provider = make_provider(parse_payload({"reading": "The stars align", "type": "Cosmic"}))
        service = make_service(provider)

        response = await service.get_response("Is it fate?")

        assert response.type == "Cosmic"
        assert response.source == "remote"


class TestFallback:
    """Local fallback when the remote provider fails."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", list(FetchFailure))
    async def test_every_failure_falls_back(self, make_provider, make_service, reason):
        service = make_service(make_provider(FetchError(reason, "boom")))

        response = await service.get_response("Will I pass my exam?", use_biased=False)

        assert_classic(response)

    @pytest.mark.asyncio
    async def test_single_remote_attempt(self, failing_provider, make_service):
        service = make_service(failing_provider)

        await service.get_response("Will I win?", use_biased=True)
        await service.get_response("Will I win?", use_biased=False)

        assert failing_provider.biased_questions == ["Will I win?"]
        assert failing_provider.unbiased_calls == 1

    @pytest.mark.asyncio
    async def test_failure_logged(self, failing_provider, make_service, caplog):
        service = make_service(failing_provider)

        with caplog.at_level(logging.WARNING, logger="magic8ball.service"):
            await service.get_response("Will I win?")

        assert "using local fallback" in caplog.text
        assert "connection" in caplog.text

    @pytest.mark.asyncio
    async def test_biased_fallback_uses_sentiment_lean(self, failing_provider):
        selector = MagicMock(spec=ResponseSelector)
        selector.select.return_value = EightBallResponse("Outlook good", Category.POSITIVE)
        service = EightBallService(FortuneContext(provider=failing_provider), selector=selector)

        response = await service.get_response("will I win?", use_biased=True)

        selector.select.assert_called_once_with(Lean.POSITIVE)
        assert response.reading == "Outlook good"

    @pytest.mark.asyncio
    async def test_biased_fallback_negative_lean(self, failing_provider):
        selector = MagicMock(spec=ResponseSelector)
        selector.select.return_value = EightBallResponse("Very doubtful", Category.NEGATIVE)
        service = EightBallService(FortuneContext(provider=failing_provider), selector=selector)

        await service.get_response("Will this bad day be the worst?", use_biased=True)

        selector.select.assert_called_once_with(Lean.NEGATIVE)

    @pytest.mark.asyncio
    async def test_tie_is_unbiased(self, failing_provider):
        """No keyword hits degrades to a uniform draw, not a coin-flip lean."""
        selector = MagicMock(spec=ResponseSelector)
        selector.select.return_value = EightBallResponse("Ask again later", Category.NEUTRAL)
        service = EightBallService(FortuneContext(provider=failing_provider), selector=selector)

        await service.get_response("hello world", use_biased=True)
        await service.get_response("good or bad?", use_biased=True)

        assert selector.select.call_args_list == [((Lean.UNBIASED,),), ((Lean.UNBIASED,),)]

    @pytest.mark.asyncio
    async def test_unbiased_fallback_ignores_sentiment(self, failing_provider):
        selector = MagicMock(spec=ResponseSelector)
        selector.select.return_value = EightBallResponse("Yes", Category.POSITIVE)
        service = EightBallService(FortuneContext(provider=failing_provider), selector=selector)

        await service.get_response("this is good and great", use_biased=False)

        selector.select.assert_called_once_with(Lean.UNBIASED)

    @pytest.mark.asyncio
    async def test_biased_fallback_distribution(self, failing_provider, make_service):
        """A positive question leans the local fallback ~70% positive."""
        service = make_service(failing_provider, seed=2024)

        counts = Counter()
        for _ in range(5000):
            response = await service.get_response("will I win?", use_biased=True)
            counts[response.category] += 1

        assert counts[Category.POSITIVE] / 5000 == pytest.approx(0.70, abs=0.03)


class TestTotality:
    """get_response always returns a usable response."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", [
        "",
        "   ",
        "will I win?",
        "Will I pass my exam?",
        "bad and worst, I hate it",
        "¿Ganaré la lotería?",
        "x" * 5000,
    ])
    @pytest.mark.parametrize("use_biased", [True, False])
    async def test_always_returns_classic_fortune(self, failing_provider, make_service, question, use_biased):
        service = make_service(failing_provider)

        response = await service.get_response(question, use_biased)

        assert_classic(response)
        assert response.type in {"positive", "negative", "neutral"}

    @pytest.mark.asyncio
    async def test_end_to_end_exam_question(self, failing_provider, make_service):
        service = make_service(failing_provider, seed=None)

        response = await service.get_response("Will I pass my exam?", use_biased=False)

        assert response.reading
        assert_classic(response)

    @pytest.mark.asyncio
    async def test_unencodable_question_with_real_provider(self, make_api_provider, make_service):
        """A question the HTTP client cannot encode still gets a fortune."""
        provider = make_api_provider(
            lambda request: httpx.Response(200, json={"reading": "Yes", "type": "Positive"})
        )
        service = make_service(provider)

        response = await service.get_response("will I \ud800 win?", use_biased=True)

        assert_classic(response)

    @pytest.mark.asyncio
    async def test_invalid_url_with_real_provider(self, make_api_provider, make_service):
        def handler(request):
            raise httpx.InvalidURL("bad URL")

        service = make_service(make_api_provider(handler))

        response = await service.get_response("Will I pass my exam?", use_biased=False)

        assert_classic(response)

    def test_local_response_directly(self, failing_provider, make_service):
        response = make_service(failing_provider).local_response("will I win?", use_biased=True)
        assert_classic(response)


class TestClose:

    @pytest.mark.asyncio
    async def test_close_closes_provider(self, failing_provider, make_service):
        service = make_service(failing_provider)

        await service.close()

        assert failing_provider.closed is True
