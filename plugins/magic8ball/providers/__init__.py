"""Remote fortune providers package."""

from .base import FetchError, FetchFailure, FetchOk, FetchResult, FortuneProvider
from .eightballapi import EightBallAPIProvider

__all__ = [
    "FetchError",
    "FetchFailure",
    "FetchOk",
    "FetchResult",
    "FortuneProvider",
    "EightBallAPIProvider",
]
