# scripts/import_sp500.py
"""
Import S&P 500 stocks from Twelve Data. Run from project root:
    python scripts/import_sp500.py [SYMBOL ...]

Without arguments every S&P 500 symbol not yet in the database is
imported. Needs TWELVE_DATA_API_KEY.
"""
import asyncio
import sys

from stockforum.config.logging import setup_logging
from stockforum.domain.symbols import SP500_SYMBOLS
from stockforum.infrastructure.db.session import AsyncSessionLocal, create_tables, engine
from stockforum.infrastructure.quote_client import TwelveDataClient
from stockforum.services.price_service import import_symbols


async def main(symbols):
    await create_tables()
    async with TwelveDataClient.from_settings() as client:
        summary = await import_symbols(AsyncSessionLocal, client.fetch_quote, symbols)
    await engine.dispose()

    print("\nImport Summary:")
    print(f"Total stocks processed: {len(summary.results)}")
    print(f"Successfully imported: {summary.imported_count}")
    print(f"Skipped (already exist): {summary.skipped_count}")
    print(f"Errors: {summary.error_count}")
    for r in summary.results:
        if r.status == "error":
            print(f"  {r.symbol}: {r.message}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main(sys.argv[1:] or SP500_SYMBOLS))
