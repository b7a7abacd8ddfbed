"""
plugins/magic8ball/sentiment.py

Keyword-based question sentiment used to nudge local fortune selection.

This is a small heuristic: each keyword that appears anywhere in
the case-folded question counts once, regardless of how often it appears.
"""

from dataclasses import dataclass
from typing import Tuple

from .responses import Lean

POSITIVE_KEYWORDS: Tuple[str, ...] = (
    "good",
    "great",
    "best",
    "happy",
    "positive",
    "success",
    "win",
    "love",
    "right",
    "yes",
)

NEGATIVE_KEYWORDS: Tuple[str, ...] = (
    "bad",
    "worst",
    "fail",
    "sad",
    "negative",
    "wrong",
    "hate",
    "lose",
    "no",
    "don't",
)


@dataclass(frozen=True)
class SentimentScore:
    """Keyword hit counts for a question."""

    positive_hits: int = 0
    negative_hits: int = 0

    @property
    def lean(self) -> Lean:
        """
        Lean implied by the hit counts.

        Equal counts, including no hits at all, are unbiased.
        """
        if self.positive_hits > self.negative_hits:
            return Lean.POSITIVE
        if self.negative_hits > self.positive_hits:
            return Lean.NEGATIVE
        return Lean.UNBIASED


def score(question: str) -> SentimentScore:
    """
    Count positive and negative keyword hits in a question.

    Args:
        question: Free-text question. Empty or whitespace-only yields zero hits.

    Returns:
        SentimentScore with independent positive and negative counts.
    """
    normalized = (question or "").casefold()
    if not normalized.strip():
        return SentimentScore()

    return SentimentScore(
        positive_hits=sum(1 for word in POSITIVE_KEYWORDS if word in normalized),
        negative_hits=sum(1 for word in NEGATIVE_KEYWORDS if word in normalized),
    )
