# scripts/create_user.py
"""
Create a user (or reuse an existing one) and print a bearer token for it:
    python scripts/create_user.py alice
"""
import asyncio
import sys

from stockforum.api.security import create_access_token
from stockforum.infrastructure.db.session import AsyncSessionLocal, engine
from stockforum.infrastructure.repositories.user_repo import create_user_repo, get_user_by_username_repo


async def main(username: str):
    async with AsyncSessionLocal() as db:
        user = await get_user_by_username_repo(db, username)
        if user is None:
            user = await create_user_repo(db, username)
            print(f"Created user {user.username} (id={user.id})")
        else:
            print(f"User {user.username} already exists (id={user.id})")
    await engine.dispose()
    print(f"Token: {create_access_token(user.id)}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit("usage: python scripts/create_user.py <username>")
    asyncio.run(main(sys.argv[1]))
