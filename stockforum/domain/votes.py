# stockforum/domain/votes.py
"""
Like/dislike bookkeeping shared by stocks and comments.

Pure logic on plain data: the service layer loads a VoteLedger from a
record, applies a vote and writes the ledger back.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Set

from stockforum.domain.actors import Actor
from stockforum.domain.errors import AlreadyVotedError


class VoteDirection(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"

    @property
    def opposite(self) -> "VoteDirection":
        return VoteDirection.DISLIKE if self is VoteDirection.LIKE else VoteDirection.LIKE

    @property
    def past_tense(self) -> str:
        return f"{self.value}d"


@dataclass
class VoteLedger:
    likes: int = 0
    dislikes: int = 0
    liked_by: Set[str] = field(default_factory=set)
    disliked_by: Set[str] = field(default_factory=set)
    liked_by_anonymous: Set[str] = field(default_factory=set)
    disliked_by_anonymous: Set[str] = field(default_factory=set)

    @classmethod
    def from_record(cls, record) -> "VoteLedger":
        return cls(
            likes=record.likes or 0,
            dislikes=record.dislikes or 0,
            liked_by={str(k) for k in record.liked_by or []},
            disliked_by={str(k) for k in record.disliked_by or []},
            liked_by_anonymous={str(k) for k in record.liked_by_anonymous or []},
            disliked_by_anonymous={str(k) for k in record.disliked_by_anonymous or []},
        )

    def write_to(self, record) -> None:
        # assign fresh lists so the JSON columns are flagged dirty
        record.likes = self.likes
        record.dislikes = self.dislikes
        record.liked_by = sorted(self.liked_by)
        record.disliked_by = sorted(self.disliked_by)
        record.liked_by_anonymous = sorted(self.liked_by_anonymous)
        record.disliked_by_anonymous = sorted(self.disliked_by_anonymous)

    def voters(self, direction: VoteDirection, anonymous: bool) -> Set[str]:
        if direction is VoteDirection.LIKE:
            return self.liked_by_anonymous if anonymous else self.liked_by
        return self.disliked_by_anonymous if anonymous else self.disliked_by

    def has_voted(self, actor: Actor, direction: VoteDirection) -> bool:
        return actor.key in self.voters(direction, actor.is_anonymous)

    def count(self, direction: VoteDirection) -> int:
        return self.likes if direction is VoteDirection.LIKE else self.dislikes

    def _add(self, direction: VoteDirection, amount: int) -> None:
        if direction is VoteDirection.LIKE:
            self.likes = max(0, self.likes + amount)
        else:
            self.dislikes = max(0, self.dislikes + amount)


def apply_vote(ledger: VoteLedger, actor: Actor, direction: VoteDirection, subject: str = "item") -> VoteLedger:
    """
    Record `actor` voting `direction`.

    Raises AlreadyVotedError (and changes nothing) when the actor already
    holds a vote in that direction. A vote in the opposite direction is
    withdrawn first, so an actor is never in both sets.
    """
    direction = VoteDirection(direction)
    if ledger.has_voted(actor, direction):
        raise AlreadyVotedError(direction, subject)

    opposite = direction.opposite
    opposite_voters = ledger.voters(opposite, actor.is_anonymous)
    if actor.key in opposite_voters:
        opposite_voters.discard(actor.key)
        ledger._add(opposite, -1)

    ledger.voters(direction, actor.is_anonymous).add(actor.key)
    ledger._add(direction, 1)
    return ledger
