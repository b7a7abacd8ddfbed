"""
8Ball API Provider

Fetches readings from the 8Ball web service.
https://www.eightballapi.com/
"""

import logging
from typing import Optional

import httpx

from .base import FetchError, FetchFailure, FetchResult, FortuneProvider, parse_payload


class EightBallAPIProvider(FortuneProvider):
    """
    8Ball API provider.

    Endpoints:
    - GET /                        random reading
    - GET /biased?question=<text>  reading biased by the question

    Both return {"reading": "...", "type": "Positive|Negative|Neutral"}.

    The HTTP client is opened at construction and closed by close().
    Each fetch is a single attempt bounded by the timeout.
    """

    BASE_URL = "https://www.eightballapi.com"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        proxy: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize 8Ball API provider.

        Args:
            base_url: Service root URL
            timeout: HTTP request timeout in seconds
            proxy: Optional proxy URL for outbound requests
            client: Pre-built client (tests inject one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if client is None:
            client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout,
                proxy=proxy,
            )
        self._client = client
        self.logger = logging.getLogger(f"{__name__}.EightBallAPIProvider")

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def fetch_unbiased(self) -> FetchResult:
        """Fetch a random reading from GET /."""
        self.logger.info("Fetching random response from 8Ball API")
        return await self._fetch("/")

    async def fetch_biased(self, question: str) -> FetchResult:
        """Fetch a reading from GET /biased for the given question."""
        self.logger.info(f"Fetching biased response from 8Ball API for question: {question}")
        return await self._fetch("/biased", params={"question": question})

    async def _fetch(self, path: str, params: Optional[dict] = None) -> FetchResult:
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            return FetchError(FetchFailure.TIMEOUT, str(e) or type(e).__name__)
        except httpx.HTTPError as e:
            return FetchError(FetchFailure.CONNECTION, str(e) or type(e).__name__)
        except (httpx.InvalidURL, UnicodeError) as e:
            # Question or URL that cannot be encoded into a request
            return FetchError(FetchFailure.REQUEST, str(e) or type(e).__name__)

        if not response.is_success:
            return FetchError(
                FetchFailure.HTTP_STATUS,
                response.reason_phrase,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            return FetchError(FetchFailure.DECODE, str(e))

        result = parse_payload(data)
        self.logger.debug(f"8Ball API {path} -> {result}")
        return result

    async def close(self) -> None:
        """Close HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "EightBallAPIProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
