"""
plugins/magic8ball/service.py

Response orchestration: ask the remote provider first, fall back to local
selection when it returns a FetchError. get_response() always produces a
reading; the network is a best-effort optimization.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .providers.base import FetchOk, FortuneProvider
from .responses import EightBallResponse, Lean, ResponseSelector
from .sentiment import score

logger = logging.getLogger(__name__)


@dataclass
class FortuneContext:
    """
    Collaborators shared by every call to an EightBallService.

    Attributes:
        provider: Remote fortune provider.
        rng: Random source for local selection. Calls run on one event loop,
            so one instance per context is enough.
    """

    provider: FortuneProvider
    rng: random.Random = field(default_factory=random.Random)


class EightBallService:
    """
    Single entry point for getting a Magic 8-Ball response.

    Args:
        context: FortuneContext with the provider and random source.
        selector: Optional ResponseSelector, built from context.rng if omitted.
    """

    def __init__(self, context: FortuneContext, selector: Optional[ResponseSelector] = None):
        self.context = context
        self.selector = selector if selector is not None else ResponseSelector(context.rng)

    async def get_response(self, question: str, use_biased: bool = False) -> EightBallResponse:
        """
        Get a response for a question.

        Makes exactly one remote attempt. On any failure the response is
        selected locally: biased by the question's sentiment when use_biased
        is set, uniformly otherwise.

        Args:
            question: The yes-or-no question.
            use_biased: Whether to bias the answer by the question's sentiment.

        Returns:
            EightBallResponse from the remote service or the local catalog.
        """
        if use_biased:
            result = await self.context.provider.fetch_biased(question)
        else:
            result = await self.context.provider.fetch_unbiased()

        if isinstance(result, FetchOk):
            return result.response

        logger.warning(f"8Ball API unavailable ({result}), using local fallback")
        return self.local_response(question, use_biased)

    def local_response(self, question: str, use_biased: bool = False) -> EightBallResponse:
        """
        Select a response from the local catalog.

        Args:
            question: The question, scored only when use_biased is set.
            use_biased: Whether to lean by sentiment.

        Returns:
            Locally sourced EightBallResponse.
        """
        lean = Lean.UNBIASED
        if use_biased:
            sentiment = score(question)
            lean = sentiment.lean
            logger.debug(
                f"Question sentiment +{sentiment.positive_hits}/-{sentiment.negative_hits} "
                f"-> {lean.value}"
            )
        return self.selector.select(lean)

    async def close(self) -> None:
        """Release the provider's resources."""
        await self.context.provider.close()
