"""
Proposal registry and lifecycle state machine.

Proposals are stored with their raw fields only; the lifecycle state is
re-derived from those fields and the chain clock on every query.
"""

import logging

logger = logging.getLogger(__name__)
import copy
from typing import TYPE_CHECKING, Any, Dict, List

from ..errors.exceptions import (
    AlreadyActive,
    BelowThreshold,
    NotAContract,
    ValidationError,
)
from ..vm.contract import normalize_address
from ..vm.gas_meter import GasCost
from .core import Proposal, ProposalState, proposal_state

if TYPE_CHECKING:
    from .logic import GovernanceLogic


class ProposalRegistry:
    """Stores proposals and enforces one live proposal per proposer."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    @property
    def proposal_count(self) -> int:
        return self.logic.storage.proposal_count

    def state(self, proposal_id: int) -> ProposalState:
        storage = self.logic.storage
        return proposal_state(storage.proposal(proposal_id), storage.config, self.logic.now)

    def get_proposal(self, proposal_id: int) -> Proposal:
        """Copy of the stored proposal (mutating it does not touch storage)."""
        return copy.deepcopy(self.logic.storage.proposal(proposal_id))

    def latest_proposal_id(self, account: str) -> int:
        return self.logic.storage.peek_account(account).latest_proposal_id

    def has_live_proposal(self, account: str) -> bool:
        latest = self.latest_proposal_id(account)
        return latest != 0 and self.state(latest).is_live

    def check_if_quorum_reached(self, proposal_id: int) -> bool:
        storage = self.logic.storage
        return storage.proposal(proposal_id).total_votes >= storage.config.quorum_votes

    def get_all_proposals(self, from_id: int, to_id: int) -> List[Dict[str, Any]]:
        """Proposals ``from_id..to_id`` (inclusive, clamped) with their states."""
        if from_id < 0 or to_id < from_id:
            raise ValidationError("invalid proposal range", field="from_id", value=(from_id, to_id))
        to_id = min(to_id, self.proposal_count)
        result = []
        for proposal_id in range(from_id, to_id + 1):
            data = self.logic.storage.proposal(proposal_id).to_dict()
            data["state"] = self.state(proposal_id).value
            result.append(data)
        return result

    def propose(self, sender: str, target: str, description: str) -> int:
        return self._create(sender, target, description)

    def propose_by_delegate(
        self, sender: str, on_behalf_of: str, target: str, description: str
    ) -> int:
        proposer = self.logic.delegation.require_delegate(sender, on_behalf_of)
        return self._create(proposer, target, description)

    def _create(self, proposer: str, target: str, description: str) -> int:
        storage = self.logic.storage
        config = storage.config
        target = normalize_address(target, "target")
        if not isinstance(description, str):
            raise ValidationError("description must be text", field="description")

        if not self.logic.chain.has_code(target):
            raise NotAContract(f"target {target} is not a contract", account=proposer)

        locked = self.logic.ledger.locked_balance(proposer)
        if locked < config.proposal_threshold:
            raise BelowThreshold(
                f"locked balance {locked} is below the proposal threshold "
                f"{config.proposal_threshold}",
                account=proposer,
            )

        latest = self.latest_proposal_id(proposer)
        if latest != 0 and self.state(latest).is_live:
            raise AlreadyActive(
                f"proposer already has live proposal {latest}",
                proposal_id=latest,
                account=proposer,
            )

        start_time = self.logic.now + config.voting_delay
        end_time = start_time + config.voting_period
        proposal_id = len(storage.proposals)
        storage.proposals.append(
            Proposal(
                id=proposal_id,
                proposer=proposer,
                target=target,
                description=description,
                start_time=start_time,
                end_time=end_time,
            )
        )
        storage.account(proposer).latest_proposal_id = proposal_id
        self.logic.chain.consume_gas(GasCost.SSTORE)
        self.logic.ledger.extend_unlock(proposer, end_time + config.locking_period)

        self.logic.emit(
            "ProposalCreated",
            id=proposal_id,
            proposer=proposer,
            target=target,
            start_time=start_time,
            end_time=end_time,
            description=description,
        )
        logger.info(f"Proposal {proposal_id} created by {proposer} targeting {target}")
        return proposal_id
