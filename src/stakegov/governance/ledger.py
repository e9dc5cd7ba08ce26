"""
Stake ledger: locked balances, unlock times and token custody.

Locked tokens are held by a dedicated ``UserVault`` contract, kept apart
from the engine's own treasury balance so that proposals moving treasury
funds can never touch stake.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from ..crypto.signatures import Signature
from ..errors.exceptions import (
    InsufficientBalance,
    TokensLocked,
    Unauthorized,
    ValidationError,
)
from ..token.base import TokenInterface
from ..vm.contract import Contract, normalize_address
from ..vm.gas_meter import GasCost

if TYPE_CHECKING:
    from .logic import GovernanceLogic


@dataclass
class VaultState:
    governance: str
    token: str


class UserVault(Contract):
    """Custody contract for locked stake."""

    def __init__(self, governance: str, token: str):
        super().__init__()
        self.state = VaultState(governance=governance, token=token)

    def withdraw_tokens(self, sender: str, to: str, amount: int) -> None:
        """Release custody of ``amount`` tokens to ``to`` (governance only)."""
        with self.chain.transaction(sender):
            if normalize_address(sender, "sender") != self.state.governance:
                raise Unauthorized("only governance can withdraw stake", caller=sender)
            token = self.chain.get_contract(self.state.token, TokenInterface)
            token.transfer(self.address, to, amount)


class StakeLedger:
    """Owns the locked-balance and custody relationship of every account."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    @property
    def token(self) -> TokenInterface:
        return self.logic.chain.get_contract(self.logic.storage.token, TokenInterface)

    def locked_balance(self, account: str) -> int:
        return self.logic.storage.peek_account(account).locked_balance

    def can_withdraw_after(self, account: str) -> int:
        return self.logic.storage.peek_account(account).unlock_time

    def lock(self, sender: str, amount: int) -> None:
        """Move ``amount`` of the caller's approved tokens into custody."""
        _require_positive(amount)
        self._take_custody(sender, amount)

    def lock_for(
        self,
        sender: str,
        holder: str,
        amount: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
    ) -> None:
        """Lock ``holder``'s tokens authorized by a signed permit."""
        _require_positive(amount)
        holder = normalize_address(holder, "holder")
        self.token.permit(
            self.logic.address,
            holder,
            self.logic.address,
            amount,
            deadline,
            signature,
        )
        self._take_custody(holder, amount)

    def unlock(self, sender: str, amount: int) -> None:
        """Return ``amount`` of locked stake to the caller."""
        _require_positive(amount)
        storage = self.logic.storage
        account = storage.peek_account(sender)

        if amount > account.locked_balance:
            raise InsufficientBalance(
                f"unlock of {amount} exceeds locked balance {account.locked_balance}",
                account=sender,
            )
        if self.logic.proposals.has_live_proposal(sender):
            raise TokensLocked("account has a live proposal", account=sender)
        if self.logic.now <= account.unlock_time:
            raise TokensLocked(
                f"tokens are locked until {account.unlock_time}", account=sender
            )

        account = storage.account(sender)
        account.locked_balance -= amount
        self.logic.chain.consume_gas(GasCost.SSTORE)
        vault = self.logic.chain.get_contract(storage.user_vault, UserVault)
        vault.withdraw_tokens(self.logic.address, sender, amount)
        self.logic.emit("Unlocked", account=sender, amount=amount)
        logger.debug(f"{sender} unlocked {amount}")

    def extend_unlock(self, account: str, until: int) -> None:
        """Push ``account``'s unlock time forward; it never moves back."""
        entry = self.logic.storage.account(account)
        if until > entry.unlock_time:
            entry.unlock_time = until
            self.logic.chain.consume_gas(GasCost.SSTORE)

    def _take_custody(self, owner: str, amount: int) -> None:
        storage = self.logic.storage
        self.token.transfer_from(self.logic.address, owner, storage.user_vault, amount)
        storage.account(owner).locked_balance += amount
        self.logic.chain.consume_gas(GasCost.SSTORE)
        self.logic.emit("Locked", account=owner, amount=amount)
        logger.debug(f"{owner} locked {amount}")


def _require_positive(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise ValidationError("amount must be a positive integer", field="amount", value=amount)
