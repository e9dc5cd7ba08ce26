"""
Version 1 of the governance logic.

``GovernanceLogic`` wires the ledger, delegation, proposal, voting,
execution and gas-compensation components together and defines the public
surface reachable through the ``Governance`` proxy.
"""

import logging

logger = logging.getLogger(__name__)
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..crypto.signatures import Signature
from ..vm.contract import normalize_address
from .compensation import GasCompensator
from .core import GovernanceConfig, Proposal, ProposalState, Receipt
from .delegation import DelegationRegistry
from .execution import ExecutionEngine, ExecutionResult
from .ledger import StakeLedger
from .proposals import ProposalRegistry
from .upgrades import LogicModule
from .voting import VotingEngine

if TYPE_CHECKING:
    from .engine import Governance


class GovernanceLogic(LogicModule):
    """Stake-weighted proposal, voting and execution logic."""

    VERSION = "1"
    ENTRY_POINTS = frozenset(
        {
            "lock",
            "lock_for",
            "unlock",
            "delegate",
            "undelegate",
            "propose",
            "propose_by_delegate",
            "cast_vote",
            "cast_delegated_vote",
            "execute",
            "set_gas_compensation_cap",
        }
    )
    VIEWS = frozenset(
        {
            "state",
            "get_proposal",
            "get_receipt",
            "has_account_voted",
            "check_if_quorum_reached",
            "get_all_proposals",
            "proposal_count",
            "latest_proposal_id",
            "locked_balance",
            "can_withdraw_after",
            "get_balances",
            "delegated_to",
            "nonces",
            "config",
            "gas_compensation_cap",
            "version",
        }
    )

    def __init__(self, engine: "Governance"):
        super().__init__(engine)
        self.ledger = StakeLedger(self)
        self.delegation = DelegationRegistry(self)
        self.proposals = ProposalRegistry(self)
        self.voting = VotingEngine(self)
        self.execution = ExecutionEngine(self)
        self.compensator = GasCompensator(self)

    # Stake

    def lock(self, sender: str, amount: int) -> None:
        self.ledger.lock(sender, amount)

    def lock_for(
        self,
        sender: str,
        holder: str,
        amount: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
    ) -> None:
        self.ledger.lock_for(sender, holder, amount, deadline, signature)

    def unlock(self, sender: str, amount: int) -> None:
        self.ledger.unlock(sender, amount)

    # Delegation

    def delegate(self, sender: str, to: str) -> None:
        self.delegation.delegate(sender, to)

    def undelegate(self, sender: str) -> None:
        self.delegation.undelegate(sender)

    # Proposals

    def propose(self, sender: str, target: str, description: str) -> int:
        return self.proposals.propose(sender, target, description)

    def propose_by_delegate(
        self, sender: str, on_behalf_of: str, target: str, description: str
    ) -> int:
        return self.proposals.propose_by_delegate(sender, on_behalf_of, target, description)

    # Voting

    def cast_vote(self, sender: str, proposal_id: int, support: bool) -> None:
        eligible = self.compensator.is_eligible([sender], proposal_id)
        gas_start = self.chain.gas_used
        self.voting.cast_vote(sender, proposal_id, support)
        if eligible:
            self.compensator.reimburse(sender, gas_start)

    def cast_delegated_vote(
        self, sender: str, delegators: List[str], proposal_id: int, support: bool
    ) -> None:
        delegators = [normalize_address(d, "delegators") for d in delegators]
        eligible = bool(delegators) and self.compensator.is_eligible(delegators, proposal_id)
        gas_start = self.chain.gas_used
        self.voting.cast_delegated_vote(sender, delegators, proposal_id, support)
        if eligible:
            self.compensator.reimburse(sender, gas_start)

    # Execution

    def execute(self, sender: str, proposal_id: int) -> ExecutionResult:
        return self.execution.execute(sender, proposal_id)

    # Administration

    def set_gas_compensation_cap(self, sender: str, cap: int) -> None:
        self.compensator.set_cap(sender, cap)

    # Views

    def state(self, proposal_id: int) -> ProposalState:
        return self.proposals.state(proposal_id)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.proposals.get_proposal(proposal_id)

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        return self.voting.get_receipt(proposal_id, voter)

    def has_account_voted(self, proposal_id: int, account: str) -> bool:
        return self.voting.has_account_voted(proposal_id, account)

    def check_if_quorum_reached(self, proposal_id: int) -> bool:
        return self.proposals.check_if_quorum_reached(proposal_id)

    def get_all_proposals(self, from_id: int, to_id: int) -> List[Dict[str, Any]]:
        return self.proposals.get_all_proposals(from_id, to_id)

    def proposal_count(self) -> int:
        return self.proposals.proposal_count

    def latest_proposal_id(self, account: str) -> int:
        return self.proposals.latest_proposal_id(account)

    def locked_balance(self, account: str) -> int:
        return self.ledger.locked_balance(account)

    def can_withdraw_after(self, account: str) -> int:
        return self.ledger.can_withdraw_after(account)

    def get_balances(self, accounts: List[str]) -> List[int]:
        return [self.ledger.locked_balance(account) for account in accounts]

    def delegated_to(self, account: str) -> Optional[str]:
        return self.delegation.delegated_to(account)

    def nonces(self, account: str) -> int:
        return self.ledger.token.nonces(account)

    def config(self) -> GovernanceConfig:
        return self.storage.config

    def gas_compensation_cap(self) -> int:
        return self.storage.gas_compensation_cap

    def version(self) -> str:
        return self.VERSION
