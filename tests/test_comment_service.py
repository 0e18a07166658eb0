# tests/test_comment_service.py
import pytest
import pytest_asyncio

from stockforum.domain.actors import Anonymous, Registered
from stockforum.domain.errors import (
    AlreadyVotedError, AuthenticationError, ForbiddenError, NotFoundError, ValidationError
)
from stockforum.domain.votes import VoteDirection
from stockforum.infrastructure.repositories.stock_repo import create_stock_repo
from stockforum.services import comment_service as svc


@pytest_asyncio.fixture
async def stock(db, alice):
    return await create_stock_repo(db, {"symbol": "TSLA", "name": "Tesla", "created_by": alice.id})


def tree_ids(tree):
    return [(n.id, tree_ids(n.replies)) for n in tree]

# -------------------------------
# create
# -------------------------------

@pytest.mark.asyncio
async def test_registered_comment_has_author(db, alice, stock):
    comment = await svc.create_comment(db, Registered(alice.id), stock.id, "  to the moon  ")
    assert comment.content == "to the moon"
    assert comment.author_id == alice.id
    assert comment.author_username == "alice"
    assert comment.is_anonymous is False
    assert comment.is_reply is False

@pytest.mark.asyncio
async def test_anonymous_comment_keeps_session_token(db, stock):
    comment = await svc.create_comment(db, Anonymous("sess-1"), stock.id, "hello")
    assert comment.author_id is None
    assert comment.is_anonymous is True
    assert comment.anonymous_author_id == "sess-1"

@pytest.mark.asyncio
async def test_registered_user_can_post_anonymously(db, alice, stock):
    comment = await svc.create_comment(
        db, Registered(alice.id), stock.id, "psst", is_anonymous=True, session_token="10.0.0.9"
    )
    assert comment.author_id is None
    assert comment.anonymous_author_id == "10.0.0.9"

@pytest.mark.asyncio
async def test_create_validations(db, alice, stock):
    with pytest.raises(ValidationError):
        await svc.create_comment(db, Registered(alice.id), stock.id, "   ")
    with pytest.raises(NotFoundError):
        await svc.create_comment(db, Registered(alice.id), 999, "hi")
    with pytest.raises(NotFoundError):
        await svc.create_comment(db, Registered(alice.id), stock.id, "hi", parent_comment_id=999)
    with pytest.raises(AuthenticationError):
        await svc.create_comment(db, Registered(12345), stock.id, "ghost")

@pytest.mark.asyncio
async def test_reply_must_share_stock(db, alice, stock):
    other = await create_stock_repo(db, {"symbol": "F", "name": "Ford"})
    parent = await svc.create_comment(db, Registered(alice.id), other.id, "on ford")
    with pytest.raises(ValidationError):
        await svc.create_comment(db, Registered(alice.id), stock.id, "wrong thread", parent_comment_id=parent.id)

# -------------------------------
# threads and deletion
# -------------------------------

@pytest.mark.asyncio
async def test_tree_for_stock(db, alice, stock):
    actor = Registered(alice.id)
    a = await svc.create_comment(db, actor, stock.id, "A")
    b = await svc.create_comment(db, actor, stock.id, "B", parent_comment_id=a.id)
    c = await svc.create_comment(db, actor, stock.id, "C", parent_comment_id=b.id)

    tree = await svc.get_stock_comments_tree(db, stock.id)
    assert tree_ids(tree) == [(a.id, [(b.id, [(c.id, [])])])]
    assert tree[0].author_username == "alice"

@pytest.mark.asyncio
async def test_delete_top_level_removes_direct_replies(db, alice, stock):
    actor = Registered(alice.id)
    a = await svc.create_comment(db, actor, stock.id, "A")
    b = await svc.create_comment(db, actor, stock.id, "B", parent_comment_id=a.id)
    c = await svc.create_comment(db, actor, stock.id, "C", parent_comment_id=b.id)
    d = await svc.create_comment(db, actor, stock.id, "D")

    removed = await svc.delete_comment(db, actor, a.id)
    assert removed == 2

    tree = await svc.get_stock_comments_tree(db, stock.id)
    # C lost its parent and surfaces at top level
    assert sorted(n.id for n in tree) == sorted([c.id, d.id])

@pytest.mark.asyncio
async def test_delete_reply_keeps_siblings(db, alice, stock):
    actor = Registered(alice.id)
    a = await svc.create_comment(db, actor, stock.id, "A")
    b1 = await svc.create_comment(db, actor, stock.id, "B1", parent_comment_id=a.id)
    b2 = await svc.create_comment(db, actor, stock.id, "B2", parent_comment_id=a.id)

    await svc.delete_comment(db, actor, b1.id)

    tree = await svc.get_stock_comments_tree(db, stock.id)
    assert tree_ids(tree) == [(a.id, [(b2.id, [])])]

@pytest.mark.asyncio
async def test_only_author_edits_or_deletes(db, alice, bob, stock):
    comment = await svc.create_comment(db, Registered(alice.id), stock.id, "mine")
    with pytest.raises(ForbiddenError):
        await svc.update_comment(db, Registered(bob.id), comment.id, "hijack")
    with pytest.raises(ForbiddenError):
        await svc.delete_comment(db, Anonymous("x"), comment.id)

    updated = await svc.update_comment(db, Registered(alice.id), comment.id, "edited")
    assert updated.content == "edited"

@pytest.mark.asyncio
async def test_anonymous_comment_cannot_be_edited(db, stock):
    comment = await svc.create_comment(db, Anonymous("sess"), stock.id, "anon")
    with pytest.raises(ForbiddenError):
        await svc.update_comment(db, Anonymous("sess"), comment.id, "edit")

# -------------------------------
# votes
# -------------------------------

@pytest.mark.asyncio
async def test_vote_scenario_persists(db, alice, stock):
    comment = await svc.create_comment(db, Anonymous("s"), stock.id, "vote me")
    actor = Registered(alice.id)

    comment = await svc.vote_comment(db, actor, comment.id, VoteDirection.LIKE)
    assert (comment.likes, comment.dislikes) == (1, 0)

    comment = await svc.vote_comment(db, actor, comment.id, VoteDirection.DISLIKE)
    assert (comment.likes, comment.dislikes) == (0, 1)
    assert comment.liked_by == []
    assert comment.disliked_by == [str(alice.id)]

    with pytest.raises(AlreadyVotedError, match="You already disliked this comment"):
        await svc.vote_comment(db, actor, comment.id, VoteDirection.DISLIKE)
