# scripts/list_comments.py
"""
Print every comment, newest first. Run from project root:
    python scripts/list_comments.py
"""
import asyncio

from stockforum.infrastructure.db.session import AsyncSessionLocal, engine
from stockforum.infrastructure.repositories.comment_repo import list_all_comments_repo


async def main():
    async with AsyncSessionLocal() as db:
        comments = await list_all_comments_repo(db)

    print(f"\nFound {len(comments)} comments:\n")
    for i, c in enumerate(comments, start=1):
        print(f"Comment #{i}:")
        print(f"Content: {c.content}")
        print(f"Author: {c.author_username or 'Anonymous'}")
        print(f"Stock: {c.stock.symbol if c.stock else 'Unknown'}")
        print(f"Created: {c.created_at}")
        print(f"Likes: {c.likes}, Dislikes: {c.dislikes}")
        print(f"Is Reply: {'Yes' if c.is_reply else 'No'}")
        if c.parent_comment_id:
            print(f"Parent Comment ID: {c.parent_comment_id}")
        print("-" * 40 + "\n")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
