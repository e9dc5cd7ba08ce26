"""
Vote casting, re-voting and the closing-window extension rule.

A receipt records the weight a voter contributed; re-voting removes that
weight from its old bucket before adding the voter's current locked
balance to the chosen one, so tallies always equal the sum of receipts.
"""

import logging

logger = logging.getLogger(__name__)
import copy
from typing import TYPE_CHECKING, List, Optional

from ..errors.exceptions import ValidationError, VotingClosed, ZeroBalance
from ..vm.gas_meter import GasCost
from .core import Proposal, ProposalState, Receipt

if TYPE_CHECKING:
    from .logic import GovernanceLogic


def leading_side(proposal: Proposal) -> Optional[bool]:
    """True if "for" leads, False if "against" leads, None on a tie."""
    if proposal.for_votes == proposal.against_votes:
        return None
    return proposal.for_votes > proposal.against_votes


class VotingEngine:
    """Sole writer of vote receipts and proposal tallies."""

    def __init__(self, logic: "GovernanceLogic"):
        self.logic = logic

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        proposal = self.logic.storage.proposal(proposal_id)
        return copy.copy(proposal.receipts.get(voter, Receipt()))

    def has_account_voted(self, proposal_id: int, account: str) -> bool:
        return self.get_receipt(proposal_id, account).has_voted

    def cast_vote(self, sender: str, proposal_id: int, support: bool) -> None:
        self._cast(sender, proposal_id, support)

    def cast_delegated_vote(
        self, sender: str, delegators: List[str], proposal_id: int, support: bool
    ) -> None:
        if not delegators:
            raise ValidationError("delegators cannot be empty", field="delegators")
        for delegator in delegators:
            voter = self.logic.delegation.require_delegate(sender, delegator)
            self._cast(voter, proposal_id, support)

    def _cast(self, voter: str, proposal_id: int, support: bool) -> None:
        if not isinstance(support, bool):
            raise ValidationError("support must be a boolean", field="support", value=support)

        storage = self.logic.storage
        config = storage.config
        state = self.logic.proposals.state(proposal_id)
        if state is not ProposalState.ACTIVE:
            raise VotingClosed(
                f"voting is closed (proposal is {state.value})",
                proposal_id=proposal_id,
                account=voter,
            )

        proposal = storage.proposals[proposal_id]
        votes = self.logic.ledger.locked_balance(voter)
        if votes == 0:
            raise ZeroBalance("voter has no locked balance", proposal_id=proposal_id, account=voter)

        receipt = proposal.receipts.get(voter)
        leader_before = leading_side(proposal)

        if receipt is not None and receipt.has_voted:
            if receipt.support:
                proposal.for_votes -= receipt.votes
            else:
                proposal.against_votes -= receipt.votes

        if support:
            proposal.for_votes += votes
        else:
            proposal.against_votes += votes
        self.logic.chain.consume_gas(GasCost.SSTORE)

        now = self.logic.now
        if not proposal.extended and proposal.end_time - now < config.closing_period:
            leader_after = leading_side(proposal)
            if (
                leader_before is not None
                and leader_after is not None
                and leader_before != leader_after
            ):
                proposal.extended = True
                proposal.end_time += config.vote_extend_time
                self.logic.emit(
                    "ProposalExtended", proposal_id=proposal_id, end_time=proposal.end_time
                )
                logger.info(
                    f"Proposal {proposal_id} outcome flipped in closing period, "
                    f"voting extended to {proposal.end_time}"
                )

        proposal.receipts[voter] = Receipt(has_voted=True, support=support, votes=votes)
        self.logic.chain.consume_gas(GasCost.SSTORE)
        self.logic.ledger.extend_unlock(voter, proposal.end_time + config.locking_period)

        self.logic.emit(
            "Voted", proposal_id=proposal_id, voter=voter, support=support, votes=votes
        )
        logger.debug(f"{voter} voted {'for' if support else 'against'} {proposal_id} with {votes}")
