"""
Unit tests for locking, permit locking and unlocking stake.
"""

import logging

logger = logging.getLogger(__name__)
import pytest

from stakegov.errors import (
    InsufficientBalance,
    InvalidAuthorization,
    TokenError,
    TokensLocked,
    Unauthorized,
    ValidationError,
)
from stakegov.governance import UserVault
from stakegov.testing import tokens


class TestLock:
    """Test locking tokens for voting power."""

    def test_lock(self, bare_env):
        """Test locked tokens move into the user vault."""
        voter = bare_env.address("voter1")
        bare_env.fund_and_lock("voter1", tokens(100))

        assert bare_env.governance.locked_balance(voter) == tokens(100)
        assert bare_env.token.balance_of(voter) == 0
        assert bare_env.token.balance_of(bare_env.governance.user_vault) == tokens(100)
        assert bare_env.token.balance_of(bare_env.governance.address) == 0
        event = bare_env.events("Locked")[-1]
        assert event.args == {"account": voter, "amount": tokens(100)}

    def test_lock_accumulates(self, bare_env):
        """Test repeated locks add up."""
        bare_env.fund_and_lock("voter1", tokens(10))
        bare_env.fund_and_lock("voter1", tokens(5))

        assert bare_env.governance.locked_balance(bare_env.address("voter1")) == tokens(15)

    def test_lock_without_approval(self, bare_env):
        """Test a lock without allowance fails and changes nothing."""
        voter = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(10))

        with pytest.raises(TokenError):
            bare_env.governance.lock(voter, tokens(10))

        assert bare_env.governance.locked_balance(voter) == 0
        assert bare_env.token.balance_of(voter) == tokens(10)
        assert bare_env.events("Locked") == []

    @pytest.mark.parametrize("amount", [0, -1, True])
    def test_lock_invalid_amount(self, bare_env, amount):
        """Test non-positive amounts are rejected."""
        with pytest.raises(ValidationError):
            bare_env.governance.lock(bare_env.address("voter1"), amount)

    def test_get_balances(self, bare_env):
        """Test the batch balance view."""
        bare_env.fund_and_lock("voter1", tokens(1))
        bare_env.fund_and_lock("voter2", tokens(2))

        balances = bare_env.governance.get_balances(
            [bare_env.address("voter1"), bare_env.address("voter2"), bare_env.address("voter3")]
        )
        assert balances == [tokens(1), tokens(2), 0]


class TestLockWithPermit:
    """Test locking authorized by a signed permit."""

    def test_lock_for(self, bare_env):
        """Test anyone can submit a holder's signed permit."""
        holder = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(50))
        deadline = bare_env.chain.timestamp + 3600
        signature = bare_env.sign_permit("voter1", tokens(50), deadline)

        bare_env.governance.lock_for(
            bare_env.address("outsider"), holder, tokens(50), deadline, signature
        )

        assert bare_env.governance.locked_balance(holder) == tokens(50)
        assert bare_env.governance.locked_balance(bare_env.address("outsider")) == 0
        assert bare_env.governance.nonces(holder) == 1

    def test_replay_rejected(self, bare_env):
        """Test a permit signature works once."""
        holder = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(100))
        deadline = bare_env.chain.timestamp + 3600
        signature = bare_env.sign_permit("voter1", tokens(50), deadline)
        bare_env.governance.lock_for(holder, holder, tokens(50), deadline, signature)

        with pytest.raises(InvalidAuthorization):
            bare_env.governance.lock_for(holder, holder, tokens(50), deadline, signature)

        assert bare_env.governance.locked_balance(holder) == tokens(50)
        assert bare_env.governance.nonces(holder) == 1

    def test_expired_permit(self, bare_env):
        """Test permits past their deadline are rejected."""
        holder = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(10))
        deadline = bare_env.chain.timestamp + 10
        signature = bare_env.sign_permit("voter1", tokens(10), deadline)
        bare_env.chain.advance_time(11)

        with pytest.raises(InvalidAuthorization):
            bare_env.governance.lock_for(holder, holder, tokens(10), deadline, signature)
        assert bare_env.governance.nonces(holder) == 0

    def test_wrong_amount(self, bare_env):
        """Test a permit cannot be stretched to a larger amount."""
        holder = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(100))
        deadline = bare_env.chain.timestamp + 3600
        signature = bare_env.sign_permit("voter1", tokens(10), deadline)

        with pytest.raises(InvalidAuthorization):
            bare_env.governance.lock_for(holder, holder, tokens(100), deadline, signature)

    def test_permit_for_other_spender(self, bare_env):
        """Test a permit naming another spender does not authorize governance."""
        holder = bare_env.address("voter1")
        bare_env.fund("voter1", tokens(10))
        deadline = bare_env.chain.timestamp + 3600
        signature = bare_env.sign_permit(
            "voter1", tokens(10), deadline, spender=bare_env.address("outsider")
        )

        with pytest.raises(InvalidAuthorization):
            bare_env.governance.lock_for(holder, holder, tokens(10), deadline, signature)

    def test_insufficient_token_balance_reverts_nonce(self, bare_env):
        """Test a failed transfer also rolls back the consumed nonce."""
        holder = bare_env.address("voter1")
        deadline = bare_env.chain.timestamp + 3600
        signature = bare_env.sign_permit("voter1", tokens(10), deadline)

        with pytest.raises(TokenError):
            bare_env.governance.lock_for(holder, holder, tokens(10), deadline, signature)
        assert bare_env.governance.nonces(holder) == 0


class TestUnlock:
    """Test withdrawing stake."""

    def test_unlock_without_votes(self, bare_env):
        """Test stake that never voted can be withdrawn at once."""
        voter = bare_env.address("voter1")
        bare_env.fund_and_lock("voter1", tokens(10))

        bare_env.governance.unlock(voter, tokens(4))

        assert bare_env.governance.locked_balance(voter) == tokens(6)
        assert bare_env.token.balance_of(voter) == tokens(4)
        assert bare_env.events("Unlocked")[-1].args == {"account": voter, "amount": tokens(4)}

    def test_unlock_more_than_locked(self, bare_env):
        """Test over-withdrawal is rejected."""
        voter = bare_env.address("voter1")
        bare_env.fund_and_lock("voter1", tokens(10))

        with pytest.raises(InsufficientBalance):
            bare_env.governance.unlock(voter, tokens(11))

    def test_unlock_with_live_proposal(self, env):
        """Test a proposer cannot withdraw while their proposal is live."""
        proposer = env.address("proposer")
        env.propose()

        with pytest.raises(TokensLocked):
            env.governance.unlock(proposer, tokens(1))
        env.chain.advance_time(env.config.voting_delay + 1)
        with pytest.raises(TokensLocked):
            env.governance.unlock(proposer, tokens(1))

    def test_unlock_time_after_proposal(self, env):
        """Test the proposer's stake stays locked for the locking period."""
        proposer = env.address("proposer")
        proposal_id = env.propose()
        proposal = env.governance.get_proposal(proposal_id)
        unlock_time = env.governance.can_withdraw_after(proposer)

        assert unlock_time == proposal.end_time + env.config.locking_period

        env.move_past_end(proposal_id)
        with pytest.raises(TokensLocked):
            env.governance.unlock(proposer, tokens(1))

        env.chain.set_timestamp(unlock_time)
        with pytest.raises(TokensLocked):
            env.governance.unlock(proposer, tokens(1))

        env.chain.set_timestamp(unlock_time + 1)
        env.governance.unlock(proposer, tokens(1))
        assert env.token.balance_of(proposer) == tokens(1)

    def test_unlock_time_after_vote(self, env):
        """Test voting extends the voter's unlock time."""
        voter = env.address("voter1")
        env.fund_and_lock("voter1", tokens(10))
        proposal_id = env.propose()
        env.move_to_active(proposal_id)

        env.governance.cast_vote(voter, proposal_id, True)

        proposal = env.governance.get_proposal(proposal_id)
        assert env.governance.can_withdraw_after(voter) == (
            proposal.end_time + env.config.locking_period
        )
        with pytest.raises(TokensLocked):
            env.governance.unlock(voter, tokens(1))


class TestUserVault:
    """Test the stake custody contract."""

    def test_only_governance_withdraws(self, env):
        """Test nobody else can move stake out of the vault."""
        vault = env.chain.get_contract(env.governance.user_vault, UserVault)

        with pytest.raises(Unauthorized):
            vault.withdraw_tokens(env.address("outsider"), env.address("outsider"), 1)
        assert env.token.balance_of(vault.address) == env.token.cap // 4
