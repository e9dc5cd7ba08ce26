"""
Observability and audit trail for governance.

Every state change of the engine is announced by an event carrying enough
parameters to rebuild the registry. ``AuditTrail`` hash-chains committed
events for tamper evidence, and ``RegistryProjection`` replays them into an
off-chain copy of proposals, tallies, delegations and locked balances.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..crypto.hashing import SHA256Hasher
from ..vm.contract import ContractEvent
from ..vm.events import EventLog
from .core import Proposal, Receipt


class EventType(Enum):
    """Types of governance events."""

    PROPOSAL_CREATED = "ProposalCreated"
    VOTED = "Voted"
    PROPOSAL_EXTENDED = "ProposalExtended"
    PROPOSAL_EXECUTED = "ProposalExecuted"
    DELEGATED = "Delegated"
    UNDELEGATED = "Undelegated"
    LOCKED = "Locked"
    UNLOCKED = "Unlocked"
    UPGRADED = "Upgraded"
    PARAMETER_CHANGED = "ParameterChanged"
    GAS_COMPENSATED = "GasCompensated"
    GAS_COMPENSATION_SKIPPED = "GasCompensationSkipped"
    GAS_COMPENSATION_CAP_UPDATED = "GasCompensationCapUpdated"
    CUSTOM = "Custom"

    @classmethod
    def from_name(cls, name: str) -> "EventType":
        for member in cls:
            if member.value == name:
                return member
        return cls.CUSTOM


@dataclass
class GovernanceEvent:
    """A governance event for audit trail."""

    sequence: int
    event_type: EventType
    name: str
    args: Dict[str, Any]
    timestamp: int
    tx_index: int
    sender: Optional[str] = None

    # Cryptographic integrity
    event_hash: Optional[str] = None
    previous_event_hash: Optional[str] = None

    def __post_init__(self):
        self.event_hash = self._calculate_hash()

    @property
    def proposal_id(self) -> Optional[int]:
        if "proposal_id" in self.args:
            return self.args["proposal_id"]
        if self.event_type is EventType.PROPOSAL_CREATED:
            return self.args["id"]
        return None

    @property
    def account(self) -> Optional[str]:
        return self.args.get("voter") or self.args.get("account") or self.args.get("proposer")

    def _calculate_hash(self) -> str:
        return str(
            SHA256Hasher.hash_json(
                {
                    "sequence": self.sequence,
                    "name": self.name,
                    "args": self.args,
                    "timestamp": self.timestamp,
                    "tx_index": self.tx_index,
                    "sender": self.sender,
                    "previous_event_hash": self.previous_event_hash,
                }
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "sequence": self.sequence,
            "event_type": self.event_type.value,
            "name": self.name,
            "args": dict(self.args),
            "timestamp": self.timestamp,
            "tx_index": self.tx_index,
            "sender": self.sender,
            "event_hash": self.event_hash,
            "previous_event_hash": self.previous_event_hash,
        }


class AuditTrail:
    """Hash-chained record of a governance contract's committed events."""

    def __init__(self):
        self.events: List[GovernanceEvent] = []
        self.proposal_events: Dict[int, List[GovernanceEvent]] = {}
        self.account_events: Dict[str, List[GovernanceEvent]] = {}

    @classmethod
    def from_log(cls, event_log: EventLog, address: str) -> "AuditTrail":
        trail = cls()
        for event in event_log.filter(address=address):
            trail.add_event(event)
        return trail

    def add_event(self, event: ContractEvent) -> GovernanceEvent:
        """Add a committed contract event to the trail."""
        record = GovernanceEvent(
            sequence=len(self.events),
            event_type=EventType.from_name(event.name),
            name=event.name,
            args=dict(event.args),
            timestamp=event.timestamp,
            tx_index=event.tx_index,
            sender=event.sender,
        )
        if self.events:
            record.previous_event_hash = self.events[-1].event_hash
            record.event_hash = record._calculate_hash()

        self.events.append(record)

        if record.proposal_id is not None:
            self.proposal_events.setdefault(record.proposal_id, []).append(record)
        if record.account is not None:
            self.account_events.setdefault(record.account, []).append(record)
        return record

    def get_proposal_events(self, proposal_id: int) -> List[GovernanceEvent]:
        """Get all events for a proposal."""
        return self.proposal_events.get(proposal_id, [])

    def get_account_events(self, account: str) -> List[GovernanceEvent]:
        """Get all events for an account."""
        return self.account_events.get(account, [])

    def verify_integrity(self) -> bool:
        """Verify the integrity of the audit trail."""
        for i, event in enumerate(self.events):
            if event.event_hash != event._calculate_hash():
                return False
            if i > 0 and event.previous_event_hash != self.events[i - 1].event_hash:
                return False
        return True

    def get_audit_summary(self) -> Dict[str, Any]:
        """Get audit trail summary."""
        event_counts: Dict[str, int] = {}
        for event in self.events:
            event_counts[event.name] = event_counts.get(event.name, 0) + 1

        return {
            "total_events": len(self.events),
            "event_counts": event_counts,
            "unique_proposals": len(self.proposal_events),
            "unique_accounts": len(self.account_events),
            "integrity_verified": self.verify_integrity(),
        }


@dataclass
class RegistryProjection:
    """Registry state rebuilt from the event stream alone."""

    proposals: Dict[int, Proposal] = field(default_factory=dict)
    delegations: Dict[str, str] = field(default_factory=dict)
    locked_balances: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def replay(cls, events: Iterable[ContractEvent]) -> "RegistryProjection":
        projection = cls()
        for event in events:
            projection.apply(event)
        return projection

    def apply(self, event: ContractEvent) -> None:
        args = event.args
        name = event.name

        if name == "ProposalCreated":
            self.proposals[args["id"]] = Proposal(
                id=args["id"],
                proposer=args["proposer"],
                target=args["target"],
                description=args["description"],
                start_time=args["start_time"],
                end_time=args["end_time"],
            )
        elif name == "Voted":
            proposal = self.proposals[args["proposal_id"]]
            previous = proposal.receipts.get(args["voter"])
            if previous is not None:
                if previous.support:
                    proposal.for_votes -= previous.votes
                else:
                    proposal.against_votes -= previous.votes
            if args["support"]:
                proposal.for_votes += args["votes"]
            else:
                proposal.against_votes += args["votes"]
            proposal.receipts[args["voter"]] = Receipt(
                has_voted=True, support=args["support"], votes=args["votes"]
            )
        elif name == "ProposalExtended":
            proposal = self.proposals[args["proposal_id"]]
            proposal.end_time = args["end_time"]
            proposal.extended = True
        elif name == "ProposalExecuted":
            self.proposals[args["proposal_id"]].executed = True
        elif name == "Delegated":
            self.delegations[args["account"]] = args["to"]
        elif name == "Undelegated":
            self.delegations.pop(args["account"], None)
        elif name == "Locked":
            account = args["account"]
            self.locked_balances[account] = self.locked_balances.get(account, 0) + args["amount"]
        elif name == "Unlocked":
            account = args["account"]
            self.locked_balances[account] = self.locked_balances.get(account, 0) - args["amount"]
        else:
            logger.debug(f"Projection ignores event {name}")
