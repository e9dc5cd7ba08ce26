"""
StakeGov - token-weighted on-chain governance engine.

Stakeholders lock a governance token for voting power, submit executable
proposals, vote over a fixed window, and execute passed proposals against
the engine's own storage, including upgrades of its logic. The engine runs
on an in-process simulated chain that provides time, atomic transactions,
gas metering and an event log.
"""

__version__ = "0.1.0"

from .errors import GovernanceError, StakeGovError
from .governance import Governance, GovernanceConfig, GovernanceLogic, ProposalState
from .token import GovernanceToken
from .vm import Chain

__all__ = [
    "Chain",
    "Governance",
    "GovernanceConfig",
    "GovernanceLogic",
    "GovernanceToken",
    "ProposalState",
    "StakeGovError",
    "GovernanceError",
]
