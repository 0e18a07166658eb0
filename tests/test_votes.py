# tests/test_votes.py
import pytest

from stockforum.domain.actors import Anonymous, Registered, anonymous_from
from stockforum.domain.errors import AlreadyVotedError
from stockforum.domain.votes import VoteDirection, VoteLedger, apply_vote

LIKE = VoteDirection.LIKE
DISLIKE = VoteDirection.DISLIKE


class Record:
    """Stand-in for a Stock/Comment row."""

    def __init__(self, **kw):
        self.likes = kw.get("likes", 0)
        self.dislikes = kw.get("dislikes", 0)
        self.liked_by = kw.get("liked_by", [])
        self.disliked_by = kw.get("disliked_by", [])
        self.liked_by_anonymous = kw.get("liked_by_anonymous", [])
        self.disliked_by_anonymous = kw.get("disliked_by_anonymous", [])

# -------------------------------
# apply_vote
# -------------------------------

def test_like_then_dislike_then_dislike_again():
    actor = Registered(7)
    ledger = VoteLedger()

    apply_vote(ledger, actor, LIKE, subject="comment")
    assert (ledger.likes, ledger.dislikes) == (1, 0)

    apply_vote(ledger, actor, DISLIKE, subject="comment")
    assert (ledger.likes, ledger.dislikes) == (0, 1)
    assert "7" not in ledger.liked_by
    assert "7" in ledger.disliked_by

    with pytest.raises(AlreadyVotedError) as exc:
        apply_vote(ledger, actor, DISLIKE, subject="comment")
    assert exc.value.message == "You already disliked this comment"
    assert (ledger.likes, ledger.dislikes) == (0, 1)

def test_registered_and_anonymous_tracked_separately():
    ledger = VoteLedger()
    apply_vote(ledger, Registered(1), LIKE)
    # an anonymous session that happens to be "1" is a different voter
    apply_vote(ledger, Anonymous("1"), LIKE)
    assert ledger.likes == 2
    assert ledger.liked_by == {"1"}
    assert ledger.liked_by_anonymous == {"1"}

def test_actor_never_in_both_sets():
    actor = Anonymous("sess-a")
    ledger = VoteLedger()
    calls = [LIKE, LIKE, DISLIKE, LIKE, DISLIKE, DISLIKE]
    recorded = 0
    for direction in calls:
        try:
            apply_vote(ledger, actor, direction)
            recorded += 1
        except AlreadyVotedError:
            pass
        assert not (ledger.liked_by_anonymous & ledger.disliked_by_anonymous)
        assert ledger.likes + ledger.dislikes == 1
    assert recorded == 4

def test_counters_never_negative():
    # counter already drifted to 0 while the actor is still listed
    ledger = VoteLedger(likes=0, liked_by={"3"})
    apply_vote(ledger, Registered(3), DISLIKE)
    assert ledger.likes == 0
    assert ledger.dislikes == 1

def test_accepts_plain_direction_string():
    ledger = VoteLedger()
    apply_vote(ledger, Registered(1), "dislike")
    assert ledger.dislikes == 1

# -------------------------------
# VoteLedger <-> record
# -------------------------------

def test_round_trip_through_record():
    record = Record(likes=1, liked_by=[5])
    ledger = VoteLedger.from_record(record)
    assert ledger.has_voted(Registered(5), LIKE)

    apply_vote(ledger, Anonymous("ip-1"), DISLIKE)
    ledger.write_to(record)
    assert record.likes == 1
    assert record.dislikes == 1
    assert record.liked_by == ["5"]
    assert record.disliked_by_anonymous == ["ip-1"]

def test_record_with_null_lists():
    record = Record(liked_by=None, disliked_by=None, liked_by_anonymous=None, disliked_by_anonymous=None)
    ledger = VoteLedger.from_record(record)
    assert ledger.liked_by == set()

# -------------------------------
# actors
# -------------------------------

def test_anonymous_prefers_session_header():
    assert anonymous_from("abc", "10.0.0.1") == Anonymous("abc")

def test_anonymous_falls_back_to_ip_then_placeholder():
    assert anonymous_from(None, "10.0.0.1") == Anonymous("10.0.0.1")
    assert anonymous_from("  ", None) == Anonymous("anonymous")
