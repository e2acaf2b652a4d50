"""
Single-proposal voting ledger.

Holds one proposal's yes/no tally and the set of voters who have already
voted. Time is always supplied by the caller; the ledger never reads a clock.
"""
import logging
import threading
from datetime import datetime
from typing import Hashable, Optional

from .exceptions import (
    CapacityExceeded,
    DuplicateVote,
    InvalidCapacity,
    InvalidDeadline,
    VotingClosed,
)
from .models import (
    DEFAULT_MAX_VOTES,
    BoundedVoterSet,
    ProposalState,
    ProposalStatus,
    VoteChoice,
)

logger = logging.getLogger(__name__)


class VotingLedger:
    """Vote tally and voter membership for one proposal."""

    def __init__(
        self,
        proposal_id: Hashable,
        deadline: datetime,
        max_votes: int = DEFAULT_MAX_VOTES,
        creator: Optional[str] = None
    ):
        """
        Build a ledger without validating the deadline.

        Use `VotingLedger.create` when the deadline must lie in the future.
        A ledger whose deadline has already passed is valid and simply
        rejects every vote.

        Raises:
            InvalidCapacity: If max_votes is not a positive integer
        """
        if isinstance(max_votes, bool) or not isinstance(max_votes, int) or max_votes < 1:
            raise InvalidCapacity(f"max_votes must be a positive integer, got {max_votes!r}")

        self.proposal_id = proposal_id
        self.deadline = deadline
        self.max_votes = max_votes
        self.creator = creator
        self.yes_count = 0
        self.no_count = 0
        self.voters = BoundedVoterSet(max_votes)
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        proposal_id: Hashable,
        deadline: datetime,
        now: datetime,
        max_votes: int = DEFAULT_MAX_VOTES,
        creator: Optional[str] = None
    ) -> 'VotingLedger':
        """
        Create a new proposal ledger.

        Args:
            proposal_id: Unique proposal identifier
            deadline: Point in time after which votes are rejected
            now: Creation time
            max_votes: Maximum number of votes the proposal accepts
            creator: Identity that created the proposal

        Returns:
            VotingLedger: Ledger with zero tallies and no voters

        Raises:
            InvalidDeadline: If deadline is not strictly after now
            InvalidCapacity: If max_votes is not a positive integer
        """
        if deadline <= now:
            raise InvalidDeadline(
                f"Deadline {deadline.isoformat()} must be after {now.isoformat()}"
            )
        ledger = cls(proposal_id, deadline, max_votes, creator)
        logger.info(
            f"Proposal created: id={proposal_id}, deadline={deadline.isoformat()}, "
            f"max_votes={max_votes}"
        )
        return ledger

    def cast_vote(self, voter_id: Hashable, choice: bool, now: datetime) -> ProposalState:
        """
        Cast a yes/no vote.

        Preconditions are checked in order: deadline, capacity, duplicate.
        The first failing check determines the exception raised, and the
        tally is left unchanged.

        Args:
            voter_id: Unique identity of the voter
            choice: True for yes, False for no
            now: Current time

        Returns:
            ProposalState: Tally after the vote was counted

        Raises:
            VotingClosed: If now is at or past the deadline
            CapacityExceeded: If max_votes votes were already accepted
            DuplicateVote: If voter_id has already voted
        """
        with self._lock:
            if now >= self.deadline:
                logger.warning(f"Vote rejected, voting closed: proposal={self.proposal_id}, voter={voter_id}")
                raise VotingClosed(
                    self.proposal_id, voter_id,
                    f"Voting has ended. Closed at {self.deadline.isoformat()}"
                )

            if self.yes_count + self.no_count >= self.max_votes:
                logger.warning(f"Vote rejected, capacity reached: proposal={self.proposal_id}, voter={voter_id}")
                raise CapacityExceeded(
                    self.proposal_id, voter_id,
                    f"Proposal accepts at most {self.max_votes} votes"
                )

            if voter_id in self.voters:
                logger.warning(f"Duplicate vote detected: proposal={self.proposal_id}, voter={voter_id}")
                raise DuplicateVote(self.proposal_id, voter_id, "You have already voted")

            self.voters.add(voter_id)
            if choice:
                self.yes_count += 1
            else:
                self.no_count += 1

            state = self._snapshot()

        logger.info(
            f"Vote accepted: proposal={self.proposal_id}, voter={voter_id}, "
            f"vote={VoteChoice.from_bool(choice).value}"
        )
        return state

    def get_state(self) -> ProposalState:
        """Return a read-only snapshot of the tally."""
        with self._lock:
            return self._snapshot()

    def status(self, now: datetime) -> ProposalStatus:
        """Return OPEN while votes can still be accepted at `now`, else CLOSED."""
        with self._lock:
            if now >= self.deadline or self.voters.is_full:
                return ProposalStatus.CLOSED
            return ProposalStatus.OPEN

    def has_voted(self, voter_id: Hashable) -> bool:
        with self._lock:
            return voter_id in self.voters

    def _snapshot(self) -> ProposalState:
        # Caller must hold self._lock
        return ProposalState(
            id=self.proposal_id,
            deadline=self.deadline,
            yes_count=self.yes_count,
            no_count=self.no_count,
            max_votes=self.max_votes,
            creator=self.creator
        )
