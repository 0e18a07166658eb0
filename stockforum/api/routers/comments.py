# stockforum/api/routers/comments.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from stockforum.api.deps import get_actor, get_anonymous_identity, get_db
from stockforum.domain.actors import Actor, Anonymous
from stockforum.domain.models import CommentDTO
from stockforum.domain.votes import VoteDirection
from stockforum.services import comment_service

router = APIRouter()


class CommentCreateReq(BaseModel):
    content: str = Field(..., max_length=5000)
    stock_id: int
    parent_comment_id: Optional[int] = None
    is_anonymous: bool = False


class CommentUpdateReq(BaseModel):
    content: str = Field(..., max_length=5000)


def _dump(comment) -> dict:
    return CommentDTO.model_validate(comment).model_dump(mode="json")


@router.get("/stock/{stock_id}", summary="Comments of a stock as threads")
async def stock_comments(stock_id: int, db: AsyncSession = Depends(get_db)):
    tree = await comment_service.get_stock_comments_tree(db, stock_id)
    return {
        "message": "Comments retrieved successfully",
        "data": [c.model_dump(mode="json") for c in tree],
    }


@router.post("", status_code=status.HTTP_201_CREATED, summary="Post a comment or reply")
async def create_comment(
    req: CommentCreateReq,
    actor: Actor = Depends(get_actor),
    anonymous: Anonymous = Depends(get_anonymous_identity),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.create_comment(
        db,
        actor,
        stock_id=req.stock_id,
        content=req.content,
        parent_comment_id=req.parent_comment_id,
        is_anonymous=req.is_anonymous,
        session_token=anonymous.session_token,
    )
    return {"message": "Comment created successfully", "comment": _dump(comment)}


@router.put("/{comment_id}", summary="Edit a comment (author only)")
async def update_comment(
    comment_id: int, req: CommentUpdateReq, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)
):
    comment = await comment_service.update_comment(db, actor, comment_id, req.content)
    return {"message": "Comment updated successfully", "comment": _dump(comment)}


@router.delete("/{comment_id}", summary="Delete a comment and its direct replies (author only)")
async def delete_comment(comment_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    await comment_service.delete_comment(db, actor, comment_id)
    return {"message": "Comment deleted successfully"}


async def _vote(db: AsyncSession, actor: Actor, comment_id: int, direction: VoteDirection) -> dict:
    comment = await comment_service.vote_comment(db, actor, comment_id, direction)
    return {
        "message": f"Comment {direction.past_tense} successfully",
        "likes": comment.likes,
        "dislikes": comment.dislikes,
    }


@router.post("/{comment_id}/like", summary="Like a comment")
async def like_comment(comment_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    return await _vote(db, actor, comment_id, VoteDirection.LIKE)


@router.post("/{comment_id}/dislike", summary="Dislike a comment")
async def dislike_comment(comment_id: int, actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)):
    return await _vote(db, actor, comment_id, VoteDirection.DISLIKE)
