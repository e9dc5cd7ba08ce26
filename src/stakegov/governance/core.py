"""
Core governance types and data structures.

This module defines the persistent layout of the governance engine
(``GovernanceStorage``), its configuration and the pure function that
derives a proposal's lifecycle state from stored fields and the clock.
"""

import logging

logger = logging.getLogger(__name__)
import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors.exceptions import ConfigurationError, ValidationError

TOKEN_UNIT = 10**18

SENTINEL_TARGET = "0x000000000000000000000000000000000000dEaD"


class ProposalState(Enum):
    """Lifecycle state of a proposal, derived on every query."""

    PENDING = "pending"
    ACTIVE = "active"
    DEFEATED = "defeated"
    TIMELOCKED = "timelocked"
    AWAITING_EXECUTION = "awaiting_execution"
    EXECUTED = "executed"
    EXPIRED = "expired"

    @property
    def is_live(self) -> bool:
        return self in (ProposalState.PENDING, ProposalState.ACTIVE)

    @property
    def is_terminal(self) -> bool:
        return self in (
            ProposalState.EXECUTED,
            ProposalState.DEFEATED,
            ProposalState.EXPIRED,
        )


@dataclass(frozen=True)
class GovernanceConfig:
    """Configuration for the governance engine. Durations are in seconds."""

    voting_delay: int = 75
    voting_period: int = 3 * 24 * 60 * 60
    execution_delay: int = 2 * 24 * 60 * 60
    execution_expiration: int = 3 * 24 * 60 * 60
    quorum_votes: int = 25_000 * TOKEN_UNIT
    proposal_threshold: int = 1_000 * TOKEN_UNIT
    closing_period: int = 60 * 60
    vote_extend_time: int = 6 * 60 * 60

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    @property
    def locking_period(self) -> int:
        """How long past a proposal's end a voter's stake stays locked."""
        return self.vote_extend_time + self.execution_expiration + self.execution_delay

    def validate(self) -> None:
        """Validate configuration."""
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(
                    f"{f.name} must be an integer", parameter=f.name
                )
            if value < 0:
                raise ConfigurationError(
                    f"{f.name} must be non-negative", parameter=f.name
                )

        if self.voting_period <= 0:
            raise ConfigurationError("voting period must be positive", parameter="voting_period")

        if self.closing_period > self.voting_period:
            raise ConfigurationError(
                "closing period cannot exceed the voting period",
                parameter="closing_period",
            )

    def replace(self, **changes: Any) -> "GovernanceConfig":
        """Return a validated copy with ``changes`` applied."""
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigurationError(
                f"unknown governance parameters {sorted(unknown)}",
                parameter=sorted(unknown)[0],
            )
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceConfig":
        return cls().replace(**data)


@dataclass
class Receipt:
    """A voter's current choice and weight on one proposal."""

    has_voted: bool = False
    support: bool = False
    votes: int = 0


@dataclass
class Proposal:
    """A governance proposal. Its state is never stored, see ``proposal_state``."""

    id: int
    proposer: str
    target: str
    description: str
    start_time: int
    end_time: int
    for_votes: int = 0
    against_votes: int = 0
    executed: bool = False
    extended: bool = False
    receipts: Dict[str, Receipt] = field(default_factory=dict)

    @property
    def total_votes(self) -> int:
        return self.for_votes + self.against_votes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "target": self.target,
            "description": self.description,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "for_votes": self.for_votes,
            "against_votes": self.against_votes,
            "executed": self.executed,
            "extended": self.extended,
        }


@dataclass
class Account:
    """Per-address ledger entry."""

    locked_balance: int = 0
    unlock_time: int = 0
    delegated_to: Optional[str] = None
    latest_proposal_id: int = 0


@dataclass
class GovernanceStorage:
    """
    Persistent layout of the governance engine.

    The layout is stable across logic upgrades: new logic modules keep their
    additional variables in ``extra`` instead of adding fields.
    """

    config: GovernanceConfig
    implementation: type
    token: str
    user_vault: str
    gas_vault: str
    admin: str
    gas_compensation_cap: int = 0
    accounts: Dict[str, Account] = field(default_factory=dict)
    proposals: List[Proposal] = field(default_factory=list)
    upgrade_count: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def proposal_count(self) -> int:
        """Number of real proposals (the sentinel at id 0 is not counted)."""
        return len(self.proposals) - 1

    def account(self, address: str) -> Account:
        """Account entry for ``address``, created on first write access."""
        entry = self.accounts.get(address)
        if entry is None:
            entry = self.accounts[address] = Account()
        return entry

    def peek_account(self, address: str) -> Account:
        """Account entry for ``address`` without creating one."""
        return self.accounts.get(address) or Account()

    def proposal(self, proposal_id: int) -> Proposal:
        if (
            not isinstance(proposal_id, int)
            or isinstance(proposal_id, bool)
            or not 0 <= proposal_id <= self.proposal_count
        ):
            raise ValidationError(
                "invalid proposal id", field="proposal_id", value=proposal_id
            )
        return self.proposals[proposal_id]


def proposal_state(proposal: Proposal, config: GovernanceConfig, now: int) -> ProposalState:
    """Derive the lifecycle state of ``proposal`` at time ``now``."""
    if proposal.executed:
        return ProposalState.EXECUTED
    if now <= proposal.start_time:
        return ProposalState.PENDING
    if now <= proposal.end_time:
        return ProposalState.ACTIVE
    if (
        proposal.for_votes <= proposal.against_votes
        or proposal.total_votes < config.quorum_votes
    ):
        return ProposalState.DEFEATED
    if now <= proposal.end_time + config.execution_delay:
        return ProposalState.TIMELOCKED
    if now <= proposal.end_time + config.execution_delay + config.execution_expiration:
        return ProposalState.AWAITING_EXECUTION
    return ProposalState.EXPIRED
