"""
One-level delegation of voting rights.

An account has at most one delegate. A delegate votes with the delegator's
own locked balance; delegation is never followed transitively and moves no
tokens.
"""

import logging

logger = logging.getLogger(__name__)
from typing import TYPE_CHECKING, List, Optional

from ..errors.exceptions import InvalidDelegatee, NotDelegate
from ..vm.contract import ZERO_ADDRESS, normalize_address
from ..vm.gas_meter import GasCost

if TYPE_CHECKING:
    from .logic import GovernanceLogic


class DelegationRegistry:
    """Mapping from account to delegate."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    def delegated_to(self, account: str) -> Optional[str]:
        return self.logic.storage.peek_account(account).delegated_to

    def delegators_of(self, delegate: str) -> List[str]:
        return [
            address
            for address, entry in self.logic.storage.accounts.items()
            if entry.delegated_to == delegate
        ]

    def delegate(self, sender: str, to: str) -> None:
        to = normalize_address(to, "to")
        current = self.delegated_to(sender)

        if to == sender:
            raise InvalidDelegatee("cannot delegate to self", account=sender)
        if to == current:
            raise InvalidDelegatee(f"already delegated to {to}", account=sender)
        if to in (ZERO_ADDRESS, self.logic.address):
            raise InvalidDelegatee(f"cannot delegate to {to}", account=sender)

        if current is not None:
            self.logic.emit("Undelegated", account=sender, **{"from": current})

        self.logic.storage.account(sender).delegated_to = to
        self.logic.chain.consume_gas(GasCost.SSTORE)
        self.logic.emit("Delegated", account=sender, to=to)
        logger.debug(f"{sender} delegated to {to}")

    def undelegate(self, sender: str) -> None:
        current = self.delegated_to(sender)
        if current is None:
            return

        self.logic.storage.account(sender).delegated_to = None
        self.logic.chain.consume_gas(GasCost.SRESET)
        self.logic.emit("Undelegated", account=sender, **{"from": current})
        logger.debug(f"{sender} undelegated from {current}")

    def require_delegate(self, sender: str, on_behalf_of: str) -> str:
        """Return ``on_behalf_of`` if ``sender`` is its delegate, else raise."""
        on_behalf_of = normalize_address(on_behalf_of, "on_behalf_of")
        if self.delegated_to(on_behalf_of) != sender:
            raise NotDelegate(
                f"{sender} is not the delegate of {on_behalf_of}", account=sender
            )
        return on_behalf_of
