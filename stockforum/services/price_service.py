# stockforum/services/price_service.py
"""
Importing stocks and refreshing prices from the quote provider.

The provider allows a handful of requests per minute, so symbols are
fetched in fixed-size batches: every symbol of a batch is requested
concurrently, then the importer sleeps before the next batch. A rate-limit
answer costs the symbol plus an extra back-off sleep. Failures are
logged per symbol and never abort a run.

Each concurrent fetch writes through its own session, taken from the
session factory passed in.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.config.settings import settings
from stockforum.domain.batching import apply_daily_cap, normalize_symbols, partition_into_batches
from stockforum.domain.errors import NotFoundError, QuoteError, ValidationError
from stockforum.domain.models import ImportSummary, Quote, SymbolOutcome
from stockforum.domain.quotes import describe_listing
from stockforum.infrastructure.models import Stock
from stockforum.infrastructure.repositories.stock_repo import (
    create_stock_from_quote_repo,
    get_existing_symbols_repo,
    list_stocks_repo,
    update_stock_prices_repo,
)

logger = logging.getLogger(__name__)

FetchQuote = Callable[[str], Awaitable[Quote]]
Sleep = Callable[[float], Awaitable[None]]
Handler = Callable[[str], Awaitable[SymbolOutcome]]


@dataclass
class ImportPolicy:
    batch_size: int = 8
    batch_delay: float = 60.0
    rate_limit_backoff: float = 60.0
    requests_per_day: Optional[int] = 800

    @classmethod
    def from_settings(cls) -> "ImportPolicy":
        return cls(
            batch_size=settings.IMPORT_BATCH_SIZE,
            batch_delay=settings.IMPORT_BATCH_DELAY_SECONDS,
            rate_limit_backoff=settings.RATE_LIMIT_BACKOFF_SECONDS,
            requests_per_day=settings.REQUESTS_PER_DAY,
        )


async def run_in_batches(
    symbols: Sequence[str],
    handle: Handler,
    policy: ImportPolicy,
    summary: ImportSummary,
    sleep: Sleep = asyncio.sleep,
) -> ImportSummary:
    """Run handle over symbols batch by batch, sleeping between batches."""
    batches = partition_into_batches(symbols, policy.batch_size)
    logger.info("Split %d symbols into %d batches of up to %d", len(symbols), len(batches), policy.batch_size)

    for i, batch in enumerate(batches):
        logger.info("Processing batch %d/%d with %d symbols", i + 1, len(batches), len(batch))
        outcomes = await asyncio.gather(*(handle(symbol) for symbol in batch))
        for outcome in outcomes:
            summary.record(outcome)
        summary.batches += 1

        ok = sum(1 for o in outcomes if o.status != "error")
        logger.info("Batch %d complete: %d/%d symbols processed", i + 1, ok, len(batch))

        if i < len(batches) - 1:
            logger.info("Waiting %.0f seconds for the rate limit", policy.batch_delay)
            await sleep(policy.batch_delay)

    return summary


async def _fetch(fetch_quote: FetchQuote, symbol: str, policy: ImportPolicy, sleep: Sleep) -> Optional[Quote]:
    """Fetch one quote; None on failure. Backs off when rate limited."""
    try:
        return await fetch_quote(symbol)
    except QuoteError as e:
        logger.warning("Error fetching %s: %s", symbol, e.message)
        if e.rate_limited:
            logger.warning("Rate limit hit for %s, waiting %.0f seconds", symbol, policy.rate_limit_backoff)
            await sleep(policy.rate_limit_backoff)
        return None
    except Exception:
        logger.exception("Unexpected error fetching %s", symbol)
        return None


def _cap(symbols: List[str], policy: ImportPolicy) -> List[str]:
    todo, dropped = apply_daily_cap(symbols, policy.requests_per_day)
    if dropped:
        logger.warning(
            "%d symbols exceed the daily limit of %d requests; only the first %d will be processed",
            len(symbols), policy.requests_per_day, len(todo),
        )
    return todo


async def import_symbols(
    session_factory,
    fetch_quote: FetchQuote,
    symbols: Sequence[str],
    created_by: Optional[int] = None,
    policy: Optional[ImportPolicy] = None,
    sleep: Sleep = asyncio.sleep,
) -> ImportSummary:
    """
    Create a stock for every symbol not in the database yet.
    Symbols already present are reported as skipped without a request.
    """
    policy = policy or ImportPolicy.from_settings()
    symbols = normalize_symbols(symbols)
    summary = ImportSummary()

    async with session_factory() as db:
        existing = await get_existing_symbols_repo(db, symbols)
    for symbol in symbols:
        if symbol in existing:
            summary.record(SymbolOutcome(symbol=symbol, status="skipped", message="Stock already exists"))

    todo = _cap([s for s in symbols if s not in existing], policy)
    logger.info("Found %d symbols already imported, %d to fetch", len(existing), len(todo))
    if not todo:
        return summary

    async def handle(symbol: str) -> SymbolOutcome:
        quote = await _fetch(fetch_quote, symbol, policy, sleep)
        if quote is None:
            return SymbolOutcome(symbol=symbol, status="error", message="Failed to fetch stock data")
        try:
            async with session_factory() as db:
                name = quote.name or f"{symbol} Stock"
                await create_stock_from_quote_repo(
                    db,
                    quote.model_copy(update={"symbol": symbol, "name": name}),
                    description=describe_listing(name, quote.exchange, quote.currency),
                    created_by=created_by,
                )
        except Exception as e:
            logger.exception("Error saving %s", symbol)
            return SymbolOutcome(symbol=symbol, status="error", message=str(e))
        logger.info("Saved %s to database", symbol)
        return SymbolOutcome(symbol=symbol, status="imported", message="Stock data imported successfully")

    await run_in_batches(todo, handle, policy, summary, sleep=sleep)
    logger.info(
        "Import completed: %d imported, %d skipped, %d errors",
        summary.imported_count, summary.skipped_count, summary.error_count,
    )
    return summary


async def refresh_prices(
    session_factory,
    fetch_quote: FetchQuote,
    symbols: Optional[Sequence[str]] = None,
    policy: Optional[ImportPolicy] = None,
    sleep: Sleep = asyncio.sleep,
) -> ImportSummary:
    """
    Update price fields of existing stocks; all stocks when symbols is None.
    Unknown symbols are skipped, nothing is created.
    """
    policy = policy or ImportPolicy.from_settings()
    if symbols is None:
        async with session_factory() as db:
            symbols = [s.symbol for s in await list_stocks_repo(db, order_by_symbol=True)]
    symbols = _cap(normalize_symbols(symbols), policy)
    summary = ImportSummary()
    logger.info("Found %d stock symbols to update", len(symbols))

    async def handle(symbol: str) -> SymbolOutcome:
        quote = await _fetch(fetch_quote, symbol, policy, sleep)
        if quote is None:
            return SymbolOutcome(symbol=symbol, status="error", message="Failed to fetch stock data")
        try:
            async with session_factory() as db:
                stock = await update_stock_prices_repo(db, symbol, quote)
        except Exception as e:
            logger.exception("Error updating %s", symbol)
            return SymbolOutcome(symbol=symbol, status="error", message=str(e))
        if stock is None:
            return SymbolOutcome(symbol=symbol, status="skipped", message="Stock not in database")
        logger.info("Updated %s: %s (%s%%)", symbol, stock.current_price, stock.percent_change)
        return SymbolOutcome(symbol=symbol, status="updated", message="Stock price updated")

    await run_in_batches(symbols, handle, policy, summary, sleep=sleep)
    logger.info("Price update completed: %d updated, %d errors", summary.updated_count, summary.error_count)
    return summary


async def update_symbol(db: AsyncSession, fetch_quote: FetchQuote, symbol: str) -> Stock:
    """Fetch one quote right away and store it. Used by the admin endpoint."""
    symbol = (symbol or "").strip().upper()
    if not symbol:
        raise ValidationError("Stock symbol is required")
    try:
        quote = await fetch_quote(symbol)
    except QuoteError as e:
        logger.warning("Error fetching %s: %s", symbol, e.message)
        raise ValidationError("Failed to fetch stock data from API") from e

    stock = await update_stock_prices_repo(db, symbol, quote)
    if stock is None:
        raise NotFoundError("Stock data not found")
    return stock


async def price_refresh_worker(session_factory, client_factory, interval: float) -> None:
    """Refresh every stock's price, then sleep interval seconds, forever."""
    logger.info("Price refresher started (every %.0f seconds)", interval)
    while True:
        try:
            async with client_factory() as client:
                await refresh_prices(session_factory, client.fetch_quote)
        except Exception:
            logger.exception("Price refresh run failed")
        await asyncio.sleep(interval)
