# stockforum/domain/quotes.py
"""
Turning raw quote payloads into Quote objects.

Payloads follow the Twelve Data /quote shape: numbers arrive as strings,
errors arrive as {"status": "error", "code": ..., "message": ...}.
"""
from typing import Any, Dict, Optional

from stockforum.domain.errors import QuoteError
from stockforum.domain.models import Quote

RATE_LIMIT_CODE = 429


def to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def compute_percent_change(close: Optional[float], previous_close: Optional[float]) -> Optional[float]:
    if close is None or not previous_close:
        return None
    return round((close - previous_close) / previous_close * 100, 2)


def is_rate_limit_payload(payload: Dict[str, Any]) -> bool:
    message = str(payload.get("message") or "")
    return payload.get("code") == RATE_LIMIT_CODE or "API credits" in message


def parse_quote(symbol: str, payload: Dict[str, Any]) -> Quote:
    """Raise QuoteError for error payloads or quotes without a price."""
    if not isinstance(payload, dict) or not payload:
        raise QuoteError(symbol, "empty response")

    if payload.get("status") == "error" or payload.get("code") in (400, RATE_LIMIT_CODE):
        raise QuoteError(
            symbol,
            str(payload.get("message") or "API error"),
            rate_limited=is_rate_limit_payload(payload),
        )

    close = to_float(payload.get("close"))
    if close is None:
        raise QuoteError(symbol, "quote has no close price")

    previous_close = to_float(payload.get("previous_close"))
    percent_change = to_float(payload.get("percent_change"))
    if percent_change is None:
        percent_change = compute_percent_change(close, previous_close)

    return Quote(
        symbol=(payload.get("symbol") or symbol).upper(),
        name=payload.get("name") or None,
        exchange=payload.get("exchange") or None,
        currency=payload.get("currency") or None,
        close=close,
        previous_close=previous_close,
        percent_change=percent_change,
    )


def describe_listing(name: str, exchange: Optional[str], currency: Optional[str]) -> str:
    return f"{name} is traded on {exchange or 'the stock market'} in {currency or 'USD'}."
