# scripts/reset_comments.py
"""
Delete every comment. Run from project root:
    python scripts/reset_comments.py
"""
import asyncio

from stockforum.infrastructure.db.session import AsyncSessionLocal, engine
from stockforum.infrastructure.repositories.comment_repo import delete_all_comments_repo


async def main():
    async with AsyncSessionLocal() as db:
        deleted = await delete_all_comments_repo(db)
    await engine.dispose()
    print(f"Deleted {deleted} comments")


if __name__ == "__main__":
    asyncio.run(main())
