"""Exceptions raised by the voting ledger and proposal registry."""
from typing import Hashable

from .models import RejectionReason


class LedgerError(Exception):
    """Base class for all ledger errors."""
    pass


class InvalidDeadline(LedgerError):
    """Deadline is not strictly after the creation time."""
    pass


class InvalidCapacity(LedgerError):
    """Configured maximum number of votes is not a positive integer."""
    pass


class VoteRejected(LedgerError):
    """A vote failed one of the ledger's preconditions."""

    reason: RejectionReason

    def __init__(self, proposal_id: Hashable, voter_id: Hashable, message: str):
        super().__init__(message)
        self.proposal_id = proposal_id
        self.voter_id = voter_id


class VotingClosed(VoteRejected):
    """Vote arrived at or after the deadline."""
    reason = RejectionReason.VOTING_CLOSED


class CapacityExceeded(VoteRejected):
    """Proposal already holds its maximum number of votes."""
    reason = RejectionReason.CAPACITY_EXCEEDED


class DuplicateVote(VoteRejected):
    """Voter has already voted on this proposal."""
    reason = RejectionReason.DUPLICATE_VOTE


class ProposalNotFound(LedgerError):
    """No proposal is registered under the requested id."""

    def __init__(self, proposal_id: Hashable):
        super().__init__(f"Proposal {proposal_id} not found")
        self.proposal_id = proposal_id


class UnauthorizedCreator(LedgerError):
    """Only the registry owner may create proposals."""
    pass
