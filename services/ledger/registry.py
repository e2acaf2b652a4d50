"""
Registry of proposals.

Maps proposal ids to their ledgers and hands out ids from a counter that
only ever grows.
"""
import logging
import threading
from datetime import datetime
from typing import Dict, Hashable, List, Optional

from .exceptions import ProposalNotFound, UnauthorizedCreator
from .ledger import VotingLedger
from .models import DEFAULT_MAX_VOTES, ProposalState

logger = logging.getLogger(__name__)


class ProposalRegistry:
    """Creates proposals and routes votes to them."""

    def __init__(self, owner: Optional[str] = None, max_votes: int = DEFAULT_MAX_VOTES):
        """
        Args:
            owner: Identity allowed to create proposals (None allows anyone)
            max_votes: Default capacity for new proposals
        """
        self.owner = owner
        self.default_max_votes = max_votes
        self._ledgers: Dict[int, VotingLedger] = {}
        self._next_id = 0
        self._lock = threading.Lock()

    def create_proposal(
        self,
        deadline: datetime,
        now: datetime,
        max_votes: Optional[int] = None,
        creator: Optional[str] = None
    ) -> VotingLedger:
        """
        Create and register a new proposal under the next id.

        Args:
            deadline: Point in time after which votes are rejected
            now: Creation time
            max_votes: Capacity (defaults to the registry default)
            creator: Identity of the caller, checked against the owner

        Returns:
            VotingLedger: The registered ledger

        Raises:
            UnauthorizedCreator: If an owner is set and creator differs
            InvalidDeadline: If deadline is not strictly after now
            InvalidCapacity: If max_votes is not a positive integer
        """
        if self.owner is not None and creator != self.owner:
            logger.warning(f"Proposal creation rejected for non-owner: {creator}")
            raise UnauthorizedCreator("Only the registry owner can create proposals")

        if max_votes is None:
            max_votes = self.default_max_votes

        # Ids are only consumed by proposals that were actually created
        with self._lock:
            ledger = VotingLedger.create(self._next_id, deadline, now, max_votes, creator)
            self._ledgers[self._next_id] = ledger
            self._next_id += 1

        return ledger

    @property
    def next_proposal_id(self) -> int:
        """Id the next successfully created proposal will receive."""
        with self._lock:
            return self._next_id

    def get(self, proposal_id: int) -> VotingLedger:
        with self._lock:
            ledger = self._ledgers.get(proposal_id)
        if ledger is None:
            raise ProposalNotFound(proposal_id)
        return ledger

    def cast_vote(
        self,
        proposal_id: int,
        voter_id: Hashable,
        choice: bool,
        now: datetime
    ) -> ProposalState:
        """Cast a vote on a registered proposal. See VotingLedger.cast_vote."""
        return self.get(proposal_id).cast_vote(voter_id, choice, now)

    def list_states(self) -> List[ProposalState]:
        """Snapshots of all proposals in id order."""
        with self._lock:
            ledgers = [self._ledgers[key] for key in sorted(self._ledgers)]
        return [ledger.get_state() for ledger in ledgers]

    def __len__(self) -> int:
        with self._lock:
            return len(self._ledgers)
