# stockforum/services/comment_service.py
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.domain.actors import Actor, Anonymous, Registered
from stockforum.domain.comment_tree import build_comment_tree, count_nodes
from stockforum.domain.errors import (
    AuthenticationError, ForbiddenError, NotFoundError, ValidationError
)
from stockforum.domain.models import CommentDTO
from stockforum.domain.votes import VoteDirection, VoteLedger, apply_vote
from stockforum.infrastructure.models import Comment
from stockforum.infrastructure.repositories.comment_repo import (
    add_comment_repo,
    delete_comment_repo,
    get_comment_repo,
    get_comments_for_stock_repo,
    save_comment_repo,
)
from stockforum.infrastructure.repositories.user_repo import get_user_repo
from stockforum.services.stock_service import get_stock

logger = logging.getLogger(__name__)


def _anonymous_author_id(actor: Actor, session_token: Optional[str]) -> str:
    if isinstance(actor, Anonymous):
        return actor.session_token
    return session_token or "anonymous"


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")
    return content


async def get_comment(db: AsyncSession, comment_id: int) -> Comment:
    comment = await get_comment_repo(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


async def get_stock_comments_tree(db: AsyncSession, stock_id: int) -> List[CommentDTO]:
    """
    Service: all comments of a stock nested into threads.
    Raises NotFoundError if the stock does not exist.
    """
    stock = await get_stock(db, stock_id)
    rows = await get_comments_for_stock_repo(db, stock.id)
    tree = build_comment_tree([CommentDTO.model_validate(c) for c in rows])
    logger.debug("Built %d threads (%d comments) for stock %s", len(tree), count_nodes(tree), stock.symbol)
    return tree


async def create_comment(
    db: AsyncSession,
    actor: Actor,
    stock_id: int,
    content: str,
    parent_comment_id: Optional[int] = None,
    is_anonymous: bool = False,
    session_token: Optional[str] = None,
) -> Comment:
    """
    Post a comment or, with parent_comment_id, a reply.

    The parent must exist and belong to the same stock. Comments from
    anonymous actors, or posted with is_anonymous, carry the session token
    instead of an author. A registered user posting anonymously is recorded
    under session_token.
    """
    content = _clean_content(content)
    stock = await get_stock(db, stock_id)

    if parent_comment_id is not None:
        parent = await get_comment_repo(db, parent_comment_id)
        if not parent:
            raise NotFoundError("Parent comment not found")
        if parent.stock_id != stock.id:
            raise ValidationError("Parent comment does not belong to this stock")

    anonymous = is_anonymous or not isinstance(actor, Registered)
    author_id = None
    if not anonymous:
        if not await get_user_repo(db, actor.user_id):
            raise AuthenticationError("User not found")
        author_id = actor.user_id

    comment = await add_comment_repo(
        db,
        stock_id=stock.id,
        content=content,
        parent_comment_id=parent_comment_id,
        author_id=author_id,
        anonymous_author_id=_anonymous_author_id(actor, session_token) if anonymous else None,
        is_anonymous=anonymous,
    )
    logger.info("Comment %s posted on %s (reply to %s)", comment.id, stock.symbol, parent_comment_id)
    return comment


def _require_author(actor: Actor, comment: Comment, action: str) -> None:
    if not isinstance(actor, Registered) or comment.author_id is None or comment.author_id != actor.user_id:
        raise ForbiddenError(f"Not authorized to {action} this comment")


async def update_comment(db: AsyncSession, actor: Actor, comment_id: int, content: str) -> Comment:
    content = _clean_content(content)
    comment = await get_comment(db, comment_id)
    _require_author(actor, comment, "update")
    comment.content = content
    return await save_comment_repo(db, comment)


async def delete_comment(db: AsyncSession, actor: Actor, comment_id: int) -> int:
    """
    Delete a comment and its direct replies. Replies further down lose
    their parent and surface as top-level threads.
    """
    comment = await get_comment(db, comment_id)
    _require_author(actor, comment, "delete")
    removed = await delete_comment_repo(db, comment.id)
    logger.info("Comment %s deleted with %d direct replies", comment_id, max(0, removed - 1))
    return removed


async def vote_comment(db: AsyncSession, actor: Actor, comment_id: int, direction: VoteDirection) -> Comment:
    comment = await get_comment(db, comment_id)
    ledger = apply_vote(VoteLedger.from_record(comment), actor, direction, subject="comment")
    ledger.write_to(comment)
    return await save_comment_repo(db, comment)
