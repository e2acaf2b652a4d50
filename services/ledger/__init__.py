"""
Proposal voting ledger.

This package contains the in-process voting core used by the API service:
- VotingLedger: tally and voter set for one proposal
- ProposalRegistry: id assignment and lookup for many proposals
- Data models (ProposalState, enums) and the exception hierarchy
"""

from .models import (
    DEFAULT_MAX_VOTES,
    BoundedVoterSet,
    ProposalState,
    ProposalStatus,
    RejectionReason,
    VoteChoice,
)
from .exceptions import (
    LedgerError,
    InvalidDeadline,
    InvalidCapacity,
    VoteRejected,
    VotingClosed,
    CapacityExceeded,
    DuplicateVote,
    ProposalNotFound,
    UnauthorizedCreator,
)
from .ledger import VotingLedger
from .registry import ProposalRegistry

__all__ = [
    'DEFAULT_MAX_VOTES',
    'BoundedVoterSet',
    'ProposalState',
    'ProposalStatus',
    'RejectionReason',
    'VoteChoice',
    'LedgerError',
    'InvalidDeadline',
    'InvalidCapacity',
    'VoteRejected',
    'VotingClosed',
    'CapacityExceeded',
    'DuplicateVote',
    'ProposalNotFound',
    'UnauthorizedCreator',
    'VotingLedger',
    'ProposalRegistry',
]

__version__ = '1.0.0'
