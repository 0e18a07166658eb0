# stockforum/infrastructure/quote_client.py
"""
Async client for the Twelve Data /quote endpoint.
"""
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from stockforum.config.settings import settings
from stockforum.domain.errors import MissingConfigurationError, QuoteError
from stockforum.domain.models import Quote
from stockforum.domain.quotes import RATE_LIMIT_CODE, is_rate_limit_payload, parse_quote

logger = logging.getLogger(__name__)


class TwelveDataClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = None,
        timeout: float = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise MissingConfigurationError("TWELVE_DATA_API_KEY is not set")
        self.api_key = api_key
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.TWELVE_DATA_BASE_URL,
            timeout=timeout or settings.QUOTE_TIMEOUT_SECONDS,
        )

    @classmethod
    def from_settings(cls) -> "TwelveDataClient":
        return cls(settings.TWELVE_DATA_API_KEY)

    async def fetch_quote(self, symbol: str) -> Quote:
        logger.debug("Fetching quote for %s", symbol)
        try:
            response = await self._http.get("/quote", params={"symbol": symbol, "apikey": self.api_key})
        except httpx.HTTPError as e:
            raise QuoteError(symbol, f"request failed: {e}") from e

        if response.status_code == RATE_LIMIT_CODE:
            raise QuoteError(symbol, "rate limit exceeded", rate_limited=True)

        try:
            payload = response.json()
        except ValueError as e:
            raise QuoteError(symbol, f"invalid JSON (HTTP {response.status_code})") from e

        if response.is_error:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise QuoteError(
                symbol,
                message or f"HTTP {response.status_code}",
                rate_limited=isinstance(payload, dict) and is_rate_limit_payload(payload),
            )

        try:
            return parse_quote(symbol, payload)
        except ValidationError as e:
            raise QuoteError(symbol, f"malformed quote: {e.error_count()} invalid field(s)") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "TwelveDataClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
