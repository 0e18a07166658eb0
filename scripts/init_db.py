# scripts/init_db.py
"""
Script to initialize database tables. Run from project root:
    python scripts/init_db.py [--reset]
"""
import asyncio
import sys

from stockforum.config.logging import setup_logging
from stockforum.infrastructure.db.session import create_tables, drop_tables, engine


async def init(reset: bool = False):
    if reset:
        await drop_tables()
        print("Dropped all tables")
    await create_tables()
    await engine.dispose()
    print("DB initialized")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init(reset="--reset" in sys.argv[1:]))
