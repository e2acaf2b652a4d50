"""Unit tests for the proposal registry.

Tests id assignment, owner-only creation, lookup and independence of
proposals for the same voter.
"""

from datetime import timedelta

import pytest

from services.ledger import (
    DuplicateVote,
    InvalidDeadline,
    ProposalNotFound,
    ProposalRegistry,
    UnauthorizedCreator,
    VotingClosed,
)


class TestCreateProposal:
    """Tests for ProposalRegistry.create_proposal."""

    def test_ids_strictly_increase(self, registry, now, deadline):
        ids = [registry.create_proposal(deadline, now).proposal_id for _ in range(3)]

        assert ids == [0, 1, 2]
        assert len(registry) == 3

    def test_default_capacity_from_registry(self, now, deadline):
        registry = ProposalRegistry(max_votes=5)

        assert registry.create_proposal(deadline, now).max_votes == 5
        assert registry.create_proposal(deadline, now, max_votes=7).max_votes == 7

    def test_past_deadline_rejected_without_consuming_id(self, registry, now, deadline):
        with pytest.raises(InvalidDeadline):
            registry.create_proposal(now - timedelta(seconds=1), now)

        assert len(registry) == 0
        assert registry.create_proposal(deadline, now).proposal_id == 0

    def test_non_owner_cannot_create(self, now, deadline):
        """Test: only the registry owner may create proposals.

        Flow:
        1. Build a registry owned by "master"
        2. Attempt creation as another identity and anonymously
        3. Verify both are rejected and no proposal exists
        4. Verify the owner can create
        """
        registry = ProposalRegistry(owner="master")

        with pytest.raises(UnauthorizedCreator):
            registry.create_proposal(deadline, now, creator="intruder")
        with pytest.raises(UnauthorizedCreator):
            registry.create_proposal(deadline, now)

        assert len(registry) == 0
        assert registry.create_proposal(deadline, now, creator="master").proposal_id == 0


class TestLookupAndVoting:
    """Tests for routing votes through the registry."""

    def test_unknown_proposal(self, registry):
        with pytest.raises(ProposalNotFound) as exc_info:
            registry.get(42)

        assert exc_info.value.proposal_id == 42

    def test_cast_vote_on_unknown_proposal(self, registry, now):
        with pytest.raises(ProposalNotFound):
            registry.cast_vote(0, "voter1", True, now)

    def test_same_voter_on_different_proposals(self, registry, now, deadline):
        """Test: a voter may vote once on each separate proposal."""
        first = registry.create_proposal(deadline, now)
        second = registry.create_proposal(deadline, now)

        registry.cast_vote(first.proposal_id, "voter_multi_1", True, now)
        registry.cast_vote(second.proposal_id, "voter_multi_1", False, now)

        state1 = first.get_state()
        state2 = second.get_state()
        assert (state1.yes_count, state1.no_count) == (1, 0)
        assert (state2.yes_count, state2.no_count) == (0, 1)

        with pytest.raises(DuplicateVote):
            registry.cast_vote(first.proposal_id, "voter_multi_1", True, now)

    def test_proposals_close_independently(self, registry, now):
        short = registry.create_proposal(now + timedelta(minutes=1), now)
        long = registry.create_proposal(now + timedelta(hours=1), now)
        later = now + timedelta(minutes=5)

        with pytest.raises(VotingClosed):
            registry.cast_vote(short.proposal_id, "voter1", True, later)

        state = registry.cast_vote(long.proposal_id, "voter1", True, later)
        assert state.yes_count == 1

    def test_list_states_in_id_order(self, registry, now, deadline):
        for _ in range(3):
            registry.create_proposal(deadline, now)
        registry.cast_vote(1, "voter1", False, now)

        states = registry.list_states()

        assert [state.id for state in states] == [0, 1, 2]
        assert [state.no_count for state in states] == [0, 1, 0]


class TestRegistryBookkeeping:
    """Tests for the next proposal id and the recorded creator."""

    def test_next_proposal_id_tracks_creations(self, registry, now, deadline):
        """Test: next_proposal_id increments after every successful creation.

        Flow:
        1. Verify a fresh registry reports 0
        2. Create two proposals, checking the counter after each
        3. Fail a creation with a past deadline
        4. Verify the counter did not move
        """
        assert registry.next_proposal_id == 0

        registry.create_proposal(deadline, now)
        assert registry.next_proposal_id == 1

        registry.create_proposal(deadline + timedelta(hours=1), now)
        assert registry.next_proposal_id == 2

        with pytest.raises(InvalidDeadline):
            registry.create_proposal(now, now)
        assert registry.next_proposal_id == 2

    def test_creator_recorded_in_state(self, now, deadline):
        registry = ProposalRegistry(owner="master")

        first = registry.create_proposal(deadline, now, creator="master")
        second = registry.create_proposal(deadline + timedelta(hours=1), now, creator="master")

        assert first.creator == "master"
        assert first.get_state().creator == second.get_state().creator == "master"
        assert first.get_state().deadline != second.get_state().deadline

    def test_creator_without_owner(self, registry, now, deadline):
        ledger = registry.create_proposal(deadline, now, creator="alice")
        anonymous = registry.create_proposal(deadline, now)

        assert ledger.get_state().creator == "alice"
        assert anonymous.get_state().creator is None
