# stockforum/infrastructure/repositories/comment_repo.py
from typing import List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from stockforum.infrastructure.models import Comment


async def get_comment_repo(db: AsyncSession, comment_id: int) -> Optional[Comment]:
    result = await db.execute(
        select(Comment)
        .options(joinedload(Comment.author))
        .where(Comment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_comments_for_stock_repo(db: AsyncSession, stock_id: int) -> List[Comment]:
    """
    Fetch every comment for a stock, replies included, as a flat list.
    Nesting is left to the caller.
    """
    result = await db.execute(
        select(Comment)
        .options(joinedload(Comment.author))
        .where(Comment.stock_id == stock_id)
        .order_by(Comment.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def list_all_comments_repo(db: AsyncSession) -> List[Comment]:
    result = await db.execute(
        select(Comment)
        .options(joinedload(Comment.author), joinedload(Comment.stock))
        .order_by(Comment.created_at.desc())
    )
    return result.scalars().all()


async def add_comment_repo(
    db: AsyncSession,
    stock_id: int,
    content: str,
    parent_comment_id: Optional[int] = None,
    author_id: Optional[int] = None,
    anonymous_author_id: Optional[str] = None,
    is_anonymous: bool = False,
) -> Comment:
    comment = Comment(
        stock_id=stock_id,
        content=content,
        parent_comment_id=parent_comment_id,
        is_reply=parent_comment_id is not None,
        author_id=author_id,
        anonymous_author_id=anonymous_author_id,
        is_anonymous=is_anonymous,
    )
    db.add(comment)
    await db.commit()
    return await get_comment_repo(db, comment.id)


async def save_comment_repo(db: AsyncSession, comment: Comment) -> Comment:
    db.add(comment)
    await db.commit()
    return await get_comment_repo(db, comment.id)


async def delete_comment_repo(db: AsyncSession, comment_id: int) -> int:
    """
    Delete a comment and its direct replies. Deeper replies are left in
    place. Returns the number of rows removed.
    """
    result = await db.execute(
        delete(Comment).where(or_(Comment.id == comment_id, Comment.parent_comment_id == comment_id))
    )
    await db.commit()
    return result.rowcount


async def delete_all_comments_repo(db: AsyncSession) -> int:
    result = await db.execute(delete(Comment))
    await db.commit()
    return result.rowcount
