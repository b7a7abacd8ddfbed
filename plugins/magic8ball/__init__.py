"""
plugins/magic8ball/__init__.py

Magic 8-Ball fortune-telling launcher plugin.

Provides fortune-telling entertainment with:
- Readings from the 8Ball API, with a local fallback
- Classic 20 8-ball responses
- Question sentiment bias (optional)
- Launcher query results, context menus and settings over NATS
"""

from .responses import (
    CLASSIC_CATALOG,
    Category,
    EightBallResponse,
    FortuneCatalog,
    FortuneEntry,
    Lean,
    ResponseSelector,
    UnrecognizedCategory,
    normalize_category,
    POSITIVE_RESPONSES,
    NEUTRAL_RESPONSES,
    NEGATIVE_RESPONSES,
)
from .sentiment import SentimentScore, score
from .providers import (
    EightBallAPIProvider,
    FetchError,
    FetchFailure,
    FetchOk,
    FortuneProvider,
)
from .service import EightBallService, FortuneContext
from .plugin import EightBallPlugin

__all__ = [
    "CLASSIC_CATALOG",
    "Category",
    "EightBallResponse",
    "FortuneCatalog",
    "FortuneEntry",
    "Lean",
    "ResponseSelector",
    "UnrecognizedCategory",
    "normalize_category",
    "POSITIVE_RESPONSES",
    "NEUTRAL_RESPONSES",
    "NEGATIVE_RESPONSES",
    "SentimentScore",
    "score",
    "EightBallAPIProvider",
    "FetchError",
    "FetchFailure",
    "FetchOk",
    "FortuneProvider",
    "EightBallService",
    "FortuneContext",
    "EightBallPlugin",
]
