"""
Property-based tests for governance invariants using Hypothesis.

Random sequences of locks, unlocks, delegations, votes and clock moves are
applied to a live deployment; after every step the stake, tally and
lock-time invariants must still hold.
"""

import logging

logger = logging.getLogger(__name__)
import pytest
from hypothesis import HealthCheck, given, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, initialize, invariant, rule

from stakegov.errors import (
    InsufficientBalance,
    InvalidDelegatee,
    NotDelegate,
    TokensLocked,
    VotingClosed,
    ZeroBalance,
)
from stakegov.governance import GovernanceConfig, Proposal, ProposalState, proposal_state
from stakegov.testing import GovernanceFixture, tokens

VOTERS = ["proposer", "voter1", "voter2", "voter3", "delegate"]

LIFECYCLE_ORDER = {
    ProposalState.PENDING: 0,
    ProposalState.ACTIVE: 1,
    ProposalState.TIMELOCKED: 2,
    ProposalState.DEFEATED: 2,
    ProposalState.AWAITING_EXECUTION: 3,
    ProposalState.EXPIRED: 4,
}


class GovernanceStateMachine(RuleBasedStateMachine):
    """Drives one proposal through random stake and vote activity."""

    @initialize()
    def setup(self):
        self.env = GovernanceFixture()
        for name in VOTERS:
            self.env.fund(name, tokens(1_000_000))
        self.env.lock("proposer", tokens(10_000))
        self.proposal_id = self.env.propose()
        self.unlock_times = {}
        self.last_total = 0

    @rule(name=st.sampled_from(VOTERS), amount=st.integers(min_value=1, max_value=20_000))
    def lock(self, name, amount):
        self.env.lock(name, tokens(amount))

    @rule(name=st.sampled_from(VOTERS), amount=st.integers(min_value=1, max_value=20_000))
    def unlock(self, name, amount):
        try:
            self.env.governance.unlock(self.env.address(name), tokens(amount))
        except (InsufficientBalance, TokensLocked):
            pass

    @rule(name=st.sampled_from(VOTERS), support=st.booleans())
    def vote(self, name, support):
        try:
            self.env.governance.cast_vote(self.env.address(name), self.proposal_id, support)
        except (VotingClosed, ZeroBalance):
            pass

    @rule(name=st.sampled_from(VOTERS), support=st.booleans())
    def vote_as_delegate(self, name, support):
        delegate = self.env.address("delegate")
        try:
            self.env.governance.cast_delegated_vote(
                delegate, [self.env.address(name)], self.proposal_id, support
            )
        except (NotDelegate, VotingClosed, ZeroBalance):
            pass

    @rule(name=st.sampled_from(VOTERS))
    def delegate(self, name):
        try:
            self.env.governance.delegate(self.env.address(name), self.env.address("delegate"))
        except InvalidDelegatee:
            pass

    @rule(seconds=st.integers(min_value=0, max_value=120_000))
    def advance(self, seconds):
        self.env.chain.advance_time(seconds)

    @invariant()
    def stake_is_conserved(self):
        governance = self.env.governance
        locked = sum(governance.locked_balance(self.env.address(name)) for name in VOTERS)
        assert locked == self.env.token.balance_of(governance.user_vault)

    @invariant()
    def tally_equals_receipts(self):
        proposal = self.env.governance.get_proposal(self.proposal_id)
        receipts = list(proposal.receipts.values())
        assert proposal.for_votes == sum(r.votes for r in receipts if r.support)
        assert proposal.against_votes == sum(r.votes for r in receipts if not r.support)

    @invariant()
    def unlock_times_never_decrease(self):
        for name in VOTERS:
            address = self.env.address(name)
            current = self.env.governance.can_withdraw_after(address)
            assert current >= self.unlock_times.get(address, 0)
            self.unlock_times[address] = current

    @invariant()
    def total_votes_grow_while_active(self):
        state = self.env.governance.state_of(self.proposal_id)
        total = self.env.governance.get_proposal(self.proposal_id).total_votes
        if state is ProposalState.ACTIVE:
            assert total >= self.last_total
        self.last_total = total


GovernanceStateMachine.TestCase.settings = settings(
    max_examples=20,
    stateful_step_count=25,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
TestGovernanceStateMachine = GovernanceStateMachine.TestCase


class TestGovernanceProperties:
    """Property-based tests for single operations."""

    @settings(max_examples=20, deadline=None)
    @given(
        locked=st.integers(min_value=1, max_value=1_000_000),
        withdrawn=st.integers(min_value=1, max_value=1_000_000),
    )
    def test_lock_unlock_round_trip(self, locked, withdrawn):
        """Test stake that never voted comes back in full."""
        env = GovernanceFixture()
        voter = env.address("voter1")
        env.fund_and_lock("voter1", locked)

        if withdrawn > locked:
            with pytest.raises(InsufficientBalance):
                env.governance.unlock(voter, withdrawn)
            withdrawn = locked
        env.governance.unlock(voter, withdrawn)

        assert env.token.balance_of(voter) == withdrawn
        assert env.governance.locked_balance(voter) == locked - withdrawn

    @settings(max_examples=50, deadline=None)
    @given(
        voting_period=st.integers(min_value=1, max_value=10_000),
        execution_delay=st.integers(min_value=0, max_value=10_000),
        execution_expiration=st.integers(min_value=0, max_value=10_000),
        for_votes=st.integers(min_value=0, max_value=100),
        against_votes=st.integers(min_value=0, max_value=100),
        offsets=st.lists(st.integers(min_value=0, max_value=40_000), min_size=2, max_size=20),
    )
    def test_state_only_moves_forward(
        self,
        voting_period,
        execution_delay,
        execution_expiration,
        for_votes,
        against_votes,
        offsets,
    ):
        """Test the derived state never goes back as time advances."""
        config = GovernanceConfig(
            voting_period=voting_period,
            execution_delay=execution_delay,
            execution_expiration=execution_expiration,
            closing_period=0,
            quorum_votes=50,
        )
        proposal = Proposal(
            id=1,
            proposer="0x" + "11" * 20,
            target="0x" + "22" * 20,
            description="",
            start_time=1_000,
            end_time=1_000 + voting_period,
            for_votes=for_votes,
            against_votes=against_votes,
        )

        states = [proposal_state(proposal, config, 1_000 + o) for o in sorted(offsets)]

        ranks = [LIFECYCLE_ORDER[state] for state in states]
        assert ranks == sorted(ranks)
        if ProposalState.DEFEATED in states:
            assert not {ProposalState.TIMELOCKED, ProposalState.AWAITING_EXECUTION} & set(states)
