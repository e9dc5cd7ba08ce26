"""
Token-weighted, upgradeable on-chain governance.

Holders lock the governance token for voting power, submit executable
proposals, vote during a fixed window and execute passed proposals with a
privileged context that can also replace the governance logic.
"""

from .compensation import GasCompensationVault, GasCompensator
from .core import (
    SENTINEL_TARGET,
    TOKEN_UNIT,
    Account,
    GovernanceConfig,
    GovernanceStorage,
    Proposal,
    ProposalState,
    Receipt,
    proposal_state,
)
from .delegation import DelegationRegistry
from .engine import Governance
from .execution import ExecutionContext, ExecutionEngine, ExecutionResult, ProposalPayload
from .ledger import StakeLedger, UserVault
from .logic import GovernanceLogic
from .observability import AuditTrail, EventType, GovernanceEvent, RegistryProjection
from .proposals import ProposalRegistry
from .upgrades import LogicModule
from .voting import VotingEngine, leading_side

__all__ = [
    # Core types
    "ProposalState",
    "GovernanceConfig",
    "GovernanceStorage",
    "Proposal",
    "Receipt",
    "Account",
    "proposal_state",
    "SENTINEL_TARGET",
    "TOKEN_UNIT",
    # Engine
    "Governance",
    "GovernanceLogic",
    "LogicModule",
    # Components
    "StakeLedger",
    "UserVault",
    "DelegationRegistry",
    "ProposalRegistry",
    "VotingEngine",
    "leading_side",
    "ExecutionEngine",
    "ExecutionContext",
    "ExecutionResult",
    "ProposalPayload",
    "GasCompensator",
    "GasCompensationVault",
    # Observability
    "AuditTrail",
    "EventType",
    "GovernanceEvent",
    "RegistryProjection",
]
