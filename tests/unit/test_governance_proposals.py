"""
Unit tests for proposal creation and the proposal registry views.
"""

import logging

logger = logging.getLogger(__name__)
import pytest

from stakegov.errors import AlreadyActive, BelowThreshold, NotAContract, ValidationError
from stakegov.governance import ProposalState
from stakegov.testing import Dummy, tokens


class TestPropose:
    """Test creating proposals."""

    def test_propose(self, env):
        """Test a new proposal's fields, event and proposer bookkeeping."""
        proposer = env.address("proposer")
        target = env.deploy(Dummy())
        now = env.chain.timestamp

        proposal_id = env.governance.propose(proposer, target, "Add dummy")

        assert proposal_id == 1
        assert env.governance.proposal_count == 1
        proposal = env.governance.get_proposal(proposal_id)
        assert proposal.start_time == now + env.config.voting_delay
        assert proposal.end_time == proposal.start_time + env.config.voting_period
        assert proposal.for_votes == proposal.against_votes == 0
        assert not proposal.executed and not proposal.extended
        assert env.governance.state_of(proposal_id) is ProposalState.PENDING
        assert env.governance.latest_proposal_id(proposer) == proposal_id

        event = env.events("ProposalCreated")[-1]
        assert event.args == {
            "id": proposal_id,
            "proposer": proposer,
            "target": target,
            "start_time": proposal.start_time,
            "end_time": proposal.end_time,
            "description": "Add dummy",
        }

    def test_ids_are_sequential(self, env):
        """Test ids increase by one per proposal."""
        env.fund_and_lock("voter1", tokens(1_000))

        first = env.propose("proposer")
        second = env.propose("voter1")

        assert (first, second) == (1, 2)
        assert env.governance.proposal_count == 2

    def test_target_must_be_contract(self, env):
        """Test plain accounts cannot be proposal targets."""
        with pytest.raises(NotAContract):
            env.governance.propose(env.address("proposer"), env.address("outsider"), "x")
        assert env.governance.proposal_count == 0

    def test_below_threshold(self, env):
        """Test proposers need the threshold locked."""
        env.fund_and_lock("voter1", tokens(999))
        target = env.deploy(Dummy())

        with pytest.raises(BelowThreshold):
            env.governance.propose(env.address("voter1"), target, "x")

    def test_threshold_is_inclusive(self, env):
        """Test exactly the threshold is enough."""
        env.fund_and_lock("voter1", env.config.proposal_threshold)

        assert env.propose("voter1") == 1

    def test_one_live_proposal_per_proposer(self, env):
        """Test a second proposal is refused while the first is pending or active."""
        proposal_id = env.propose()

        with pytest.raises(AlreadyActive):
            env.propose()
        env.move_to_active(proposal_id)
        with pytest.raises(AlreadyActive):
            env.propose()

        env.move_past_end(proposal_id)
        assert env.propose() == 2

    def test_description_must_be_text(self, env):
        """Test descriptions are strings."""
        target = env.deploy(Dummy())

        with pytest.raises(ValidationError):
            env.governance.propose(env.address("proposer"), target, 42)

    def test_failed_propose_leaves_no_trace(self, env):
        """Test a rejected proposal emits nothing and keeps the proposer free."""
        target = env.deploy(Dummy())
        env.fund_and_lock("voter1", tokens(1))

        with pytest.raises(BelowThreshold):
            env.governance.propose(env.address("voter1"), target, "x")

        assert env.events("ProposalCreated") == []
        assert env.governance.can_withdraw_after(env.address("voter1")) == 0


class TestProposalViews:
    """Test the registry's read-only views."""

    def test_sentinel(self, env):
        """Test id 0 is a reserved, already-executed placeholder."""
        assert env.governance.proposal_count == 0
        assert env.governance.state_of(0) is ProposalState.EXECUTED

    @pytest.mark.parametrize("proposal_id", [1, 99, -1])
    def test_invalid_id(self, env, proposal_id):
        """Test unknown ids are rejected."""
        with pytest.raises(ValidationError):
            env.governance.state_of(proposal_id)

    def test_get_proposal_returns_copy(self, env):
        """Test callers cannot mutate storage through the view."""
        proposal_id = env.propose()
        proposal = env.governance.get_proposal(proposal_id)

        proposal.for_votes = 10**30

        assert env.governance.get_proposal(proposal_id).for_votes == 0

    def test_get_all_proposals(self, env):
        """Test the range view includes states and clamps the upper bound."""
        env.fund_and_lock("voter1", tokens(1_000))
        env.propose("proposer")
        env.propose("voter1")

        proposals = env.governance.get_all_proposals(0, 50)

        assert [p["id"] for p in proposals] == [0, 1, 2]
        assert proposals[0]["state"] == "executed"
        assert proposals[1]["state"] == "pending"
        assert proposals[2]["proposer"] == env.address("voter1")

    def test_get_all_proposals_invalid_range(self, env):
        """Test reversed and negative ranges are rejected."""
        with pytest.raises(ValidationError):
            env.governance.get_all_proposals(2, 1)
        with pytest.raises(ValidationError):
            env.governance.get_all_proposals(-1, 1)

    def test_check_if_quorum_reached(self, env, quorum):
        """Test quorum counts the total of both sides."""
        proposal_id = env.propose()
        env.fund_and_lock("voter1", quorum // 2)
        env.fund_and_lock("voter2", quorum - quorum // 2)
        env.move_to_active(proposal_id)

        env.governance.cast_vote(env.address("voter1"), proposal_id, True)
        assert not env.governance.check_if_quorum_reached(proposal_id)

        env.governance.cast_vote(env.address("voter2"), proposal_id, False)
        assert env.governance.check_if_quorum_reached(proposal_id)
