"""Test and demo helpers: deployment fixtures and sample proposal payloads."""

from .fixtures import DEFAULT_ACCOUNTS, START_TIMESTAMP, GovernanceFixture, tokens
from .payloads import (
    ContextCapturingProposal,
    DeployDummyProposal,
    Dummy,
    FailingProposal,
    NewImplementation,
    ReentrantProposal,
    StateChangeProposal,
    TransferProposal,
    UpgradeProposal,
)

__all__ = [
    "GovernanceFixture",
    "START_TIMESTAMP",
    "DEFAULT_ACCOUNTS",
    "tokens",
    "Dummy",
    "DeployDummyProposal",
    "StateChangeProposal",
    "TransferProposal",
    "UpgradeProposal",
    "NewImplementation",
    "FailingProposal",
    "ReentrantProposal",
    "ContextCapturingProposal",
]
