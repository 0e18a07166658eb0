# tests/test_quotes.py
import pytest

from stockforum.domain.errors import QuoteError
from stockforum.domain.quotes import compute_percent_change, describe_listing, parse_quote, to_float

APPLE = {
    "symbol": "AAPL",
    "name": "Apple Inc",
    "exchange": "NASDAQ",
    "currency": "USD",
    "close": "189.50",
    "previous_close": "187.00",
    "percent_change": "1.33690",
}


def test_parse_full_quote():
    quote = parse_quote("AAPL", APPLE)
    assert quote.symbol == "AAPL"
    assert quote.name == "Apple Inc"
    assert quote.close == 189.5
    assert quote.previous_close == 187.0
    assert quote.percent_change == pytest.approx(1.3369)

def test_percent_change_computed_when_missing():
    payload = dict(APPLE, percent_change=None)
    quote = parse_quote("AAPL", payload)
    assert quote.percent_change == 1.34

def test_compute_percent_change_guards():
    assert compute_percent_change(100.0, None) is None
    assert compute_percent_change(100.0, 0) is None
    assert compute_percent_change(None, 10.0) is None
    assert compute_percent_change(90.0, 100.0) == -10.0

def test_to_float():
    assert to_float("1.5") == 1.5
    assert to_float("") is None
    assert to_float("n/a") is None

def test_error_payload_raises():
    with pytest.raises(QuoteError) as exc:
        parse_quote("ZZZZ", {"status": "error", "code": 400, "message": "symbol not found"})
    assert not exc.value.rate_limited
    assert exc.value.message == "symbol not found"

def test_rate_limit_payload_flagged():
    payload = {"code": 429, "message": "You have run out of API credits for the current minute.", "status": "error"}
    with pytest.raises(QuoteError) as exc:
        parse_quote("AAPL", payload)
    assert exc.value.rate_limited

def test_missing_close_raises():
    with pytest.raises(QuoteError):
        parse_quote("AAPL", dict(APPLE, close=None))

def test_empty_payload_raises():
    with pytest.raises(QuoteError):
        parse_quote("AAPL", {})

def test_describe_listing_defaults():
    assert describe_listing("Apple Inc", "NASDAQ", "USD") == "Apple Inc is traded on NASDAQ in USD."
    assert describe_listing("X Corp", None, None) == "X Corp is traded on the stock market in USD."
