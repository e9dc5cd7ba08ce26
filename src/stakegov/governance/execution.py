"""
Proposal execution with a revocable privileged context.

A matured proposal's payload runs with an ``ExecutionContext``: a handle
that grants mutable access to the engine's storage (parameters, logic
upgrades, treasury transfers, deployments) for the duration of one call.
The handle is revoked as soon as the call returns or raises.
"""

import logging

logger = logging.getLogger(__name__)
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ..errors.exceptions import (
    CapabilityRevoked,
    NotAContract,
    NotExecutable,
    ProposalExecutionFailed,
)
from ..token.base import TokenInterface
from ..vm.contract import Contract, normalize_address
from ..vm.gas_meter import GasCost
from .core import GovernanceConfig, GovernanceStorage, ProposalState
from .upgrades import validate_implementation

if TYPE_CHECKING:
    from ..vm.chain import Chain
    from .engine import Governance
    from .logic import GovernanceLogic


@dataclass
class ExecutionResult:
    """Result of a successful proposal execution."""

    proposal_id: int
    target: str
    output: Any = None
    executed_at: Optional[int] = None
    gas_used: Optional[int] = None


class ProposalPayload(Contract, ABC):
    """Contract run by an executed proposal."""

    @abstractmethod
    def execute_proposal(self, context: "ExecutionContext") -> Any:
        """Perform the governance action; the return value is the proposal output."""


class ExecutionContext:
    """Privileged, single-use handle on the engine's state."""

    def __init__(self, engine: "Governance", proposal_id: int):
        self._engine = engine
        self._proposal_id = proposal_id
        self._revoked = False

    def _active_engine(self) -> "Governance":
        if self._revoked:
            raise CapabilityRevoked(
                f"execution context of proposal {self._proposal_id} has been revoked"
            )
        return self._engine

    def revoke(self) -> None:
        self._revoked = True

    @property
    def revoked(self) -> bool:
        return self._revoked

    @property
    def proposal_id(self) -> int:
        self._active_engine()
        return self._proposal_id

    @property
    def storage(self) -> GovernanceStorage:
        return self._active_engine().storage

    @property
    def config(self) -> GovernanceConfig:
        return self.storage.config

    @property
    def address(self) -> str:
        return self._active_engine().address

    @property
    def chain(self) -> "Chain":
        return self._active_engine().chain

    @property
    def now(self) -> int:
        return self.chain.timestamp

    def set_parameter(self, name: str, value: int) -> None:
        """Change one governance parameter (validated)."""
        storage = self.storage
        storage.config = storage.config.replace(**{name: value})
        self.emit("ParameterChanged", name=name, value=value)
        logger.info(f"Governance parameter {name} set to {value}")

    def upgrade_to(self, implementation: type) -> None:
        """Install a new logic module; takes effect on the next call."""
        implementation = validate_implementation(implementation)
        storage = self.storage
        storage.implementation = implementation
        storage.upgrade_count += 1
        self.emit(
            "Upgraded",
            implementation=implementation.__qualname__,
            version=implementation.VERSION,
        )
        logger.info(
            f"Governance logic upgraded to {implementation.__qualname__} "
            f"v{implementation.VERSION}"
        )

    def transfer_tokens(self, to: str, amount: int) -> None:
        """Pay ``amount`` out of the engine's treasury balance."""
        token = self.chain.get_contract(self.storage.token, TokenInterface)
        token.transfer(self.address, normalize_address(to, "to"), amount)

    def deploy(self, contract: Contract) -> str:
        """Deploy ``contract`` with the engine as deployer."""
        return self.chain.deploy(contract, deployer=self.address)

    def emit(self, event: str, **args: Any) -> None:
        self.chain.emit(self.address, event, **args)


class ExecutionEngine:
    """Runs matured proposals exactly once."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    def execute(self, sender: str, proposal_id: int) -> ExecutionResult:
        state = self.logic.proposals.state(proposal_id)
        if state is not ProposalState.AWAITING_EXECUTION:
            raise NotExecutable(
                f"proposal {proposal_id} is {state.value}", proposal_id=proposal_id
            )

        proposal = self.logic.storage.proposals[proposal_id]
        # Commit point: a re-entrant execute now sees the proposal as executed.
        proposal.executed = True
        self.logic.chain.consume_gas(GasCost.SSTORE)

        chain = self.logic.chain
        if not chain.has_code(proposal.target):
            raise NotAContract(
                f"target {proposal.target} has no code", proposal_id=proposal_id
            )
        payload = chain.get_contract(proposal.target)
        handler = getattr(payload, "execute_proposal", None)
        if handler is None:
            raise ProposalExecutionFailed(
                f"target {proposal.target} does not implement execute_proposal",
                proposal_id=proposal_id,
            )

        gas_before = chain.gas_used
        context = ExecutionContext(self.logic.engine, proposal_id)
        chain.consume_gas(GasCost.CALL)
        try:
            output = handler(context)
        except Exception as e:
            raise ProposalExecutionFailed(
                f"proposal {proposal_id} payload failed: {e}",
                proposal_id=proposal_id,
                cause=e,
            ) from e
        finally:
            context.revoke()

        self.logic.emit("ProposalExecuted", proposal_id=proposal_id, output=output)
        logger.info(f"Proposal {proposal_id} executed by {sender}")
        return ExecutionResult(
            proposal_id=proposal_id,
            target=proposal.target,
            output=output,
            executed_at=self.logic.now,
            gas_used=chain.gas_used - gas_before,
        )
