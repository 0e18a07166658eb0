# scripts/update_prices.py
"""
Refresh prices of stocks already in the database. Run from project root:
    python scripts/update_prices.py [SYMBOL ...]
"""
import asyncio
import sys

from stockforum.config.logging import setup_logging
from stockforum.infrastructure.db.session import AsyncSessionLocal, engine
from stockforum.infrastructure.quote_client import TwelveDataClient
from stockforum.services.price_service import refresh_prices


async def main(symbols=None):
    async with TwelveDataClient.from_settings() as client:
        summary = await refresh_prices(AsyncSessionLocal, client.fetch_quote, symbols)
    await engine.dispose()
    print(f"Updated {summary.updated_count}, skipped {summary.skipped_count}, errors {summary.error_count}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main(sys.argv[1:] or None))
