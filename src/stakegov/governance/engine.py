"""
Governance engine proxy.

``Governance`` is the deployed contract. It owns the persistent
``GovernanceStorage`` and forwards every call to an instance of the logic
class named in ``storage.implementation``. Transacting calls run inside a
chain transaction so they either fully commit or leave no trace.
"""

import logging

logger = logging.getLogger(__name__)
from typing import Any, Dict, List, Optional, Union

from ..crypto.signatures import Signature
from ..errors.exceptions import GovernanceError
from ..vm.contract import Contract, normalize_address
from .compensation import GasCompensationVault
from .core import (
    SENTINEL_TARGET,
    GovernanceConfig,
    GovernanceStorage,
    Proposal,
    ProposalState,
    Receipt,
)
from .execution import ExecutionResult
from .ledger import UserVault
from .logic import GovernanceLogic
from .upgrades import LogicModule, validate_implementation


class Governance(Contract):
    """Upgradeable, token-weighted governance contract."""

    def __init__(
        self,
        token: str,
        admin: str,
        config: Optional[GovernanceConfig] = None,
        implementation: type = GovernanceLogic,
    ):
        super().__init__()
        self._token = normalize_address(token, "token")
        self._admin = normalize_address(admin, "admin")
        self._config = config or GovernanceConfig()
        self._implementation = validate_implementation(implementation)
        self._bound: Optional[LogicModule] = None

    def on_deploy(self, deployer: str) -> None:
        user_vault = self.chain.deploy(UserVault(self.address, self._token), self.address)
        gas_vault = self.chain.deploy(GasCompensationVault(self.address), self.address)
        self.state = GovernanceStorage(
            config=self._config,
            implementation=self._implementation,
            token=self._token,
            user_vault=user_vault,
            gas_vault=gas_vault,
            admin=self._admin,
        )
        self.state.proposals.append(
            Proposal(
                id=0,
                proposer=self.address,
                target=SENTINEL_TARGET,
                description="",
                start_time=0,
                end_time=0,
                executed=True,
            )
        )
        logger.info(f"Governance deployed at {self.address} (token {self._token})")

    @property
    def storage(self) -> GovernanceStorage:
        if self.state is None:
            raise GovernanceError("governance is not deployed")
        return self.state

    @property
    def logic(self) -> LogicModule:
        """The active logic instance, rebound whenever the implementation changes."""
        implementation = self.storage.implementation
        if type(self._bound) is not implementation:
            self._bound = implementation(self)
        return self._bound

    @property
    def user_vault(self) -> str:
        return self.storage.user_vault

    @property
    def gas_vault(self) -> str:
        return self.storage.gas_vault

    # Generic dispatch

    def call(self, sender: str, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a transacting entry point of the active logic."""
        logic = self.logic
        if not logic.is_entry_point(name):
            raise GovernanceError(
                f"{type(logic).__name__} has no entry point {name!r}"
            )
        sender = normalize_address(sender, "sender")
        with self.chain.transaction(sender):
            return self.logic.dispatch(name, sender, *args, **kwargs)

    def view(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a read-only method of the active logic."""
        logic = self.logic
        if logic.is_entry_point(name):
            raise GovernanceError(f"{name!r} is not a view")
        return logic.dispatch(name, *args, **kwargs)

    # Stake

    def lock(self, sender: str, amount: int) -> None:
        self.call(sender, "lock", amount)

    def lock_for(
        self,
        sender: str,
        holder: str,
        amount: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
    ) -> None:
        self.call(sender, "lock_for", holder, amount, deadline, signature)

    def unlock(self, sender: str, amount: int) -> None:
        self.call(sender, "unlock", amount)

    # Delegation

    def delegate(self, sender: str, to: str) -> None:
        self.call(sender, "delegate", to)

    def undelegate(self, sender: str) -> None:
        self.call(sender, "undelegate")

    # Proposals and votes

    def propose(self, sender: str, target: str, description: str) -> int:
        return self.call(sender, "propose", target, description)

    def propose_by_delegate(
        self, sender: str, on_behalf_of: str, target: str, description: str
    ) -> int:
        return self.call(sender, "propose_by_delegate", on_behalf_of, target, description)

    def cast_vote(self, sender: str, proposal_id: int, support: bool) -> None:
        self.call(sender, "cast_vote", proposal_id, support)

    def cast_delegated_vote(
        self, sender: str, delegators: List[str], proposal_id: int, support: bool
    ) -> None:
        self.call(sender, "cast_delegated_vote", list(delegators), proposal_id, support)

    def execute(self, sender: str, proposal_id: int) -> ExecutionResult:
        return self.call(sender, "execute", proposal_id)

    def set_gas_compensation_cap(self, sender: str, cap: int) -> None:
        self.call(sender, "set_gas_compensation_cap", cap)

    # Views

    def state_of(self, proposal_id: int) -> ProposalState:
        return self.view("state", proposal_id)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.view("get_proposal", proposal_id)

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        return self.view("get_receipt", proposal_id, normalize_address(voter, "voter"))

    def has_account_voted(self, proposal_id: int, account: str) -> bool:
        return self.view("has_account_voted", proposal_id, normalize_address(account))

    def check_if_quorum_reached(self, proposal_id: int) -> bool:
        return self.view("check_if_quorum_reached", proposal_id)

    def get_all_proposals(self, from_id: int, to_id: int) -> List[Dict[str, Any]]:
        return self.view("get_all_proposals", from_id, to_id)

    @property
    def proposal_count(self) -> int:
        return self.view("proposal_count")

    def latest_proposal_id(self, account: str) -> int:
        return self.view("latest_proposal_id", normalize_address(account))

    def locked_balance(self, account: str) -> int:
        return self.view("locked_balance", normalize_address(account))

    def can_withdraw_after(self, account: str) -> int:
        return self.view("can_withdraw_after", normalize_address(account))

    def get_balances(self, accounts: List[str]) -> List[int]:
        return self.view("get_balances", [normalize_address(a) for a in accounts])

    def delegated_to(self, account: str) -> Optional[str]:
        return self.view("delegated_to", normalize_address(account))

    def nonces(self, account: str) -> int:
        return self.view("nonces", normalize_address(account))

    @property
    def config(self) -> GovernanceConfig:
        return self.view("config")

    @property
    def gas_compensation_cap(self) -> int:
        return self.view("gas_compensation_cap")

    @property
    def version(self) -> str:
        return self.view("version")
