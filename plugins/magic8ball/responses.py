"""
plugins/magic8ball/responses.py

Magic 8-Ball fortune catalog, response types and the response selector.

The classic Magic 8-Ball has 20 responses in 3 categories:
- Positive: 10
- Neutral: 5
- Negative: 5

Unbiased selection draws uniformly from all 20. A leaning selection uses a
weighted draw over categories:
- 70% from the leaning category
- 20% from neutral
- 10% from the opposing category
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Category(Enum):
    """Response categories of the classic Magic 8-Ball."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class UnrecognizedCategory:
    """A category label returned by the remote service that is not one of ours."""

    label: str

    @property
    def value(self) -> str:
        return self.label


ResponseType = Union[Category, UnrecognizedCategory]


class Lean(Enum):
    """Direction a question nudges the selection towards."""

    UNBIASED = "unbiased"
    POSITIVE = "positive"
    NEGATIVE = "negative"


def normalize_category(raw: Optional[str]) -> ResponseType:
    """
    Map a category label to a Category, case-insensitively.

    Labels outside positive/neutral/negative are kept verbatim as an
    UnrecognizedCategory. A missing label becomes UnrecognizedCategory("unknown").

    Args:
        raw: Category label as received, e.g. "Positive".

    Returns:
        The matching Category, or an UnrecognizedCategory.
    """
    if not isinstance(raw, str) or not raw.strip():
        return UnrecognizedCategory("unknown")

    label = raw.strip()
    try:
        return Category(label.lower())
    except ValueError:
        return UnrecognizedCategory(label)


# =============================================================================
# Classic 8-Ball Responses
# =============================================================================

POSITIVE_RESPONSES: Tuple[str, ...] = (
    "It is certain",
    "It is decidedly so",
    "Without a doubt",
    "Yes definitely",
    "You may rely on it",
    "As I see it, yes",
    "Most likely",
    "Outlook good",
    "Yes",
    "Signs point to yes",
)

NEUTRAL_RESPONSES: Tuple[str, ...] = (
    "Reply hazy, try again",
    "Ask again later",
    "Better not tell you now",
    "Cannot predict now",
    "Concentrate and ask again",
)

NEGATIVE_RESPONSES: Tuple[str, ...] = (
    "Don't count on it",
    "My reply is no",
    "My sources say no",
    "Outlook not so good",
    "Very doubtful",
)

CATEGORY_EMOJI = {
    Category.POSITIVE: "✅",
    Category.NEGATIVE: "❌",
    Category.NEUTRAL: "⚠️",
}
UNKNOWN_EMOJI = "🔮"


# =============================================================================
# Response Data Classes
# =============================================================================

@dataclass(frozen=True)
class FortuneEntry:
    """A single canned fortune and its category."""

    text: str
    category: Category


@dataclass(frozen=True)
class EightBallResponse:
    """
    A reading returned to callers, whether fetched remotely or chosen locally.

    Attributes:
        reading: The fortune text. Never empty.
        category: Category, or UnrecognizedCategory for unknown remote labels.
        source: "remote" or "local".
    """

    reading: str
    category: ResponseType
    source: str = "local"

    def __post_init__(self):
        if not self.reading or not self.reading.strip():
            raise ValueError("EightBallResponse reading must not be empty")

    @property
    def type(self) -> str:
        """Category as a string: the enum value, or the literal remote label."""
        return self.category.value

    @property
    def emoji(self) -> str:
        return CATEGORY_EMOJI.get(self.category, UNKNOWN_EMOJI)

    def format(self, question: str) -> str:
        """
        Format the response for display.

        Args:
            question: The question asked.

        Returns:
            Formatted string: 🎱 "question" — reading ✅
        """
        return f'🎱 "{question}" — {self.reading} {self.emoji}'

    def to_dict(self) -> dict:
        """
        Convert response to the serialized {reading, type} form.

        Returns:
            Dictionary with reading and type.
        """
        return {
            "reading": self.reading,
            "type": self.type,
        }


# =============================================================================
# Fortune Catalog
# =============================================================================

@dataclass(frozen=True)
class FortuneCatalog:
    """
    The fixed sets of fortunes, one per category.

    Raises:
        ValueError: If any category has no entries.
    """

    positive: Tuple[FortuneEntry, ...]
    neutral: Tuple[FortuneEntry, ...]
    negative: Tuple[FortuneEntry, ...]

    def __post_init__(self):
        for category in Category:
            entries = self.for_category(category)
            if not entries:
                raise ValueError(f"Fortune catalog has no {category.value} entries")
            for entry in entries:
                if entry.category is not category:
                    raise ValueError(
                        f"Fortune {entry.text!r} is filed under {category.value} "
                        f"but tagged {entry.category.value}"
                    )

    @classmethod
    def from_texts(cls, positive, neutral, negative) -> "FortuneCatalog":
        """Build a catalog from plain per-category text sequences."""
        return cls(
            positive=tuple(FortuneEntry(t, Category.POSITIVE) for t in positive),
            neutral=tuple(FortuneEntry(t, Category.NEUTRAL) for t in neutral),
            negative=tuple(FortuneEntry(t, Category.NEGATIVE) for t in negative),
        )

    @property
    def all(self) -> Tuple[FortuneEntry, ...]:
        return self.positive + self.neutral + self.negative

    def for_category(self, category: Category) -> Tuple[FortuneEntry, ...]:
        if category is Category.POSITIVE:
            return self.positive
        elif category is Category.NEUTRAL:
            return self.neutral
        else:
            return self.negative


CLASSIC_CATALOG = FortuneCatalog.from_texts(
    POSITIVE_RESPONSES,
    NEUTRAL_RESPONSES,
    NEGATIVE_RESPONSES,
)


# =============================================================================
# Response Selector
# =============================================================================

class ResponseSelector:
    """
    Select 8-ball responses, optionally leaning towards a category.

    Unbiased selection draws uniformly from all fortunes, which gives the
    classic toy's 50/25/25 split. Leaning selection first picks a category
    out of ten equal buckets (7 leaning, 2 neutral, 1 opposing), then draws
    uniformly within it.

    Args:
        rng: Optional random.Random instance for deterministic testing.
        catalog: Optional FortuneCatalog, defaults to the classic 20.
    """

    LEAN_BUCKETS = 7
    NEUTRAL_BUCKETS = 2
    OPPOSING_BUCKETS = 1

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        catalog: Optional[FortuneCatalog] = None,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.catalog = catalog if catalog is not None else CLASSIC_CATALOG

    def select(self, lean: Lean = Lean.UNBIASED) -> EightBallResponse:
        """
        Select a response for the given lean.

        Args:
            lean: Lean.UNBIASED for a uniform draw, otherwise the direction to favour.

        Returns:
            EightBallResponse sourced locally.
        """
        if lean is Lean.UNBIASED:
            entry = self.rng.choice(self.catalog.all)
        else:
            category = self._weighted_category(lean)
            entry = self.rng.choice(self.catalog.for_category(category))

        return EightBallResponse(reading=entry.text, category=entry.category)

    def select_from_category(self, category: Category) -> EightBallResponse:
        """
        Select a response from a specific category.

        Args:
            category: The Category to select from.

        Returns:
            EightBallResponse from the specified category.
        """
        entry = self.rng.choice(self.catalog.for_category(category))
        return EightBallResponse(reading=entry.text, category=entry.category)

    def _weighted_category(self, lean: Lean) -> Category:
        if lean is Lean.POSITIVE:
            leaning, opposing = Category.POSITIVE, Category.NEGATIVE
        else:
            leaning, opposing = Category.NEGATIVE, Category.POSITIVE

        total = self.LEAN_BUCKETS + self.NEUTRAL_BUCKETS + self.OPPOSING_BUCKETS
        roll = self.rng.randrange(total)
        if roll < self.LEAN_BUCKETS:
            return leaning
        elif roll < self.LEAN_BUCKETS + self.NEUTRAL_BUCKETS:
            return Category.NEUTRAL
        else:
            return opposing
