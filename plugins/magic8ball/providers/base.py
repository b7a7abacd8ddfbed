"""
Base Fortune Provider Interface

Abstract base class for remote fortune providers and the result types they
return. Providers never raise for network or payload problems; they return a
FetchError instead so the caller can fall back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ..responses import EightBallResponse, normalize_category


class FetchFailure(Enum):
    """Why a remote fetch produced no usable response."""

    CONNECTION = "connection"
    REQUEST = "request"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    EMPTY_READING = "empty_reading"


@dataclass(frozen=True)
class FetchOk:
    """A usable response from the remote service."""

    response: EightBallResponse


@dataclass(frozen=True)
class FetchError:
    """A failed fetch, with the reason and any details for logging."""

    reason: FetchFailure
    detail: str = ""
    status_code: Optional[int] = None

    def __str__(self) -> str:
        text = self.reason.value
        if self.status_code is not None:
            text += f" ({self.status_code})"
        if self.detail:
            text += f": {self.detail}"
        return text


FetchResult = Union[FetchOk, FetchError]


def parse_payload(data: Any) -> FetchResult:
    """
    Validate a decoded remote payload.

    Args:
        data: Decoded JSON, expected to be {"reading": str, "type": str}.

    Returns:
        FetchOk with a remote-sourced response, or FetchError.
    """
    if not isinstance(data, dict):
        return FetchError(
            FetchFailure.DECODE,
            f"expected a JSON object, got {type(data).__name__}",
        )

    reading = data.get("reading")
    if not isinstance(reading, str) or not reading.strip():
        return FetchError(FetchFailure.EMPTY_READING, "payload has no reading")

    return FetchOk(
        EightBallResponse(
            reading=reading.strip(),
            category=normalize_category(data.get("type")),
            source="remote",
        )
    )


class FortuneProvider(ABC):
    """
    Base class for fortune providers.

    Providers fetch readings from a remote fortune-telling service.
    """

    @abstractmethod
    async def fetch_unbiased(self) -> FetchResult:
        """
        Fetch a random reading.

        Returns:
            FetchOk or FetchError
        """
        ...

    @abstractmethod
    async def fetch_biased(self, question: str) -> FetchResult:
        """
        Fetch a reading biased by the sentiment of the question.

        Args:
            question: The question being asked

        Returns:
            FetchOk or FetchError
        """
        ...

    async def close(self) -> None:
        """
        Close any resources used by the provider.

        Override this in subclasses that need cleanup.
        """
        pass
