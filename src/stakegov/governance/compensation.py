"""
Best-effort gas reimbursement for voters.

Vote entry points are metered; when a call is eligible the caller is paid
``min(observed_gas * gas_price, cap)`` in native currency out of a
``GasCompensationVault``. A vault that cannot pay never fails the vote.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from ..errors.exceptions import Unauthorized, ValidationError
from ..vm.contract import Contract, normalize_address

if TYPE_CHECKING:
    from .logic import GovernanceLogic

INTRINSIC_GAS = 21_000
COMPENSATION_OVERHEAD_GAS = 10_000


@dataclass
class GasVaultState:
    governance: str


class GasCompensationVault(Contract):
    """Native-currency pool used to reimburse voters."""

    def __init__(self, governance: str):
        super().__init__()
        self.state = GasVaultState(governance=governance)

    @property
    def balance(self) -> int:
        return self.chain.balance_of(self.address)

    def compensate_gas(self, sender: str, recipient: str, amount: int) -> None:
        with self.chain.transaction(sender):
            self._require_governance(sender)
            self.chain.transfer_value(self.address, recipient, amount)

    def withdraw(self, sender: str, amount: int) -> None:
        """Return ``amount`` of the pool to governance."""
        with self.chain.transaction(sender):
            self._require_governance(sender)
            self.chain.transfer_value(self.address, self.state.governance, amount)

    def _require_governance(self, sender: str) -> None:
        if normalize_address(sender, "sender") != self.state.governance:
            raise Unauthorized("only governance can move vault funds", caller=sender)


class GasCompensator:
    """Decides eligibility and pays reimbursements for vote calls."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    @property
    def cap(self) -> int:
        return self.logic.storage.gas_compensation_cap

    def set_cap(self, sender: str, cap: int) -> None:
        storage = self.logic.storage
        if sender != storage.admin:
            raise Unauthorized("only the admin can set the compensation cap", caller=sender)
        if not isinstance(cap, int) or isinstance(cap, bool) or cap < 0:
            raise ValidationError("cap must be a non-negative integer", field="cap", value=cap)
        storage.gas_compensation_cap = cap
        self.logic.emit("GasCompensationCapUpdated", cap=cap)
        logger.info(f"Gas compensation cap set to {cap}")

    def is_eligible(self, voters: Iterable[str], proposal_id: int) -> bool:
        """Eligible while quorum is not reached and some voter has not voted yet."""
        if self.logic.proposals.check_if_quorum_reached(proposal_id):
            return False
        return any(
            not self.logic.voting.has_account_voted(proposal_id, voter) for voter in voters
        )

    def reimburse(self, account: str, gas_start: int) -> int:
        """Pay ``account`` for the gas metered since ``gas_start``. Returns the amount paid."""
        chain = self.logic.chain
        gas = chain.gas_used - gas_start + INTRINSIC_GAS + COMPENSATION_OVERHEAD_GAS
        amount = min(gas * chain.gas_price, self.cap)

        if amount == 0:
            logger.debug(f"Gas compensation disabled, nothing paid to {account}")
            return 0

        vault = chain.get_contract(self.logic.storage.gas_vault, GasCompensationVault)
        if vault.balance < amount:
            logger.warning(
                f"Gas compensation of {amount} for {account} skipped: "
                f"vault holds {vault.balance}"
            )
            self.logic.emit(
                "GasCompensationSkipped",
                account=account,
                amount=amount,
                reason="insufficient vault balance",
            )
            return 0

        vault.compensate_gas(self.logic.address, account, amount)
        self.logic.emit("GasCompensated", account=account, gas=gas, amount=amount)
        logger.debug(f"Compensated {account} {amount} for {gas} gas")
        return amount

