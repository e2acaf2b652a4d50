"""
Data models for the proposal voting ledger.

This module contains:
- VoteChoice, ProposalStatus, RejectionReason enums
- ProposalState: read-only snapshot of a proposal's tally
- BoundedVoterSet: voter-membership set with a fixed capacity
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Hashable, Iterator, Optional, Set
from enum import Enum


DEFAULT_MAX_VOTES = 100


class VoteChoice(str, Enum):
    """Valid vote choices."""
    YES = "yes"
    NO = "no"

    @classmethod
    def from_bool(cls, choice: bool) -> 'VoteChoice':
        return cls.YES if choice else cls.NO


class ProposalStatus(str, Enum):
    """Lifecycle state of a proposal at a given point in time."""
    OPEN = "open"
    CLOSED = "closed"


class RejectionReason(str, Enum):
    """Why a vote was not accepted."""
    VOTING_CLOSED = "voting_closed"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    DUPLICATE_VOTE = "duplicate_vote"


@dataclass(frozen=True)
class ProposalState:
    """
    Snapshot of a proposal's tally.

    Attributes:
        id: Proposal identifier
        deadline: Point in time after which votes are rejected
        yes_count: Number of accepted "yes" votes
        no_count: Number of accepted "no" votes
        max_votes: Maximum number of votes the proposal accepts
        creator: Identity that created the proposal, if known
    """
    id: Hashable
    deadline: datetime
    yes_count: int = 0
    no_count: int = 0
    max_votes: int = DEFAULT_MAX_VOTES
    creator: Optional[str] = None

    @property
    def total_votes(self) -> int:
        return self.yes_count + self.no_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data['total_votes'] = self.total_votes
        return data


class BoundedVoterSet:
    """
    Set of voter identities that can never hold more than `capacity` members.

    Members are never removed.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self.capacity = capacity
        self._members: Set[Hashable] = set()

    def __contains__(self, voter_id: Hashable) -> bool:
        return voter_id in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._members)

    @property
    def is_full(self) -> bool:
        return len(self._members) >= self.capacity

    def add(self, voter_id: Hashable) -> None:
        """
        Add a voter identity.

        Raises:
            OverflowError: If the set is already at capacity
            KeyError: If the identity is already a member
        """
        if self.is_full:
            raise OverflowError(f"voter set is full ({self.capacity})")
        if voter_id in self._members:
            raise KeyError(voter_id)
        self._members.add(voter_id)
