"""
Ready-made governance deployments for tests and demos.

``GovernanceFixture`` builds a chain, a capped token, a governance engine
and a set of deterministic accounts, and offers helpers for the common
steps of a proposal's life (funding, locking, proposing, moving time).
"""

import logging

logger = logging.getLogger(__name__)
from typing import Dict, Iterable, List, Optional

from ..crypto.permit import PermitSigner
from ..crypto.signatures import PrivateKey, Signature
from ..governance.core import GovernanceConfig, TOKEN_UNIT
from ..governance.engine import Governance
from ..token.erc20 import DEFAULT_CAP, GovernanceToken
from ..vm.chain import Chain
from ..vm.contract import Contract, ContractEvent
from .payloads import Dummy

START_TIMESTAMP = 1577836800

DEFAULT_ACCOUNTS = (
    "deployer",
    "proposer",
    "voter1",
    "voter2",
    "voter3",
    "delegate",
    "outsider",
)


class GovernanceFixture:
    """A deployed token plus governance engine on a fresh chain."""

    def __init__(
        self,
        config: Optional[GovernanceConfig] = None,
        cap: int = DEFAULT_CAP,
        accounts: Iterable[str] = DEFAULT_ACCOUNTS,
        timestamp: int = START_TIMESTAMP,
        chain_id: int = 1,
    ):
        self.chain = Chain(chain_id=chain_id, timestamp=timestamp)
        self.keys: Dict[str, PrivateKey] = {
            name: PrivateKey.from_seed(f"stakegov:{name}") for name in accounts
        }
        self.addresses: Dict[str, str] = {
            name: key.address for name, key in self.keys.items()
        }

        deployer = self.addresses["deployer"]
        self.token = GovernanceToken(cap=cap, distribution={deployer: cap})
        self.chain.deploy(self.token, deployer)
        self.governance = Governance(self.token.address, admin=deployer, config=config)
        self.chain.deploy(self.governance, deployer)
        logger.debug(f"Governance fixture ready at {self.governance.address}")

    @property
    def config(self) -> GovernanceConfig:
        return self.governance.config

    def address(self, name: str) -> str:
        return self.addresses[name]

    def fund(self, name: str, amount: int) -> None:
        """Give ``name`` tokens out of the deployer's supply."""
        self.token.transfer(self.address("deployer"), self.address(name), amount)

    def lock(self, name: str, amount: int) -> None:
        """Approve and lock ``amount`` of ``name``'s tokens."""
        account = self.address(name)
        self.token.approve(account, self.governance.address, amount)
        self.governance.lock(account, amount)

    def fund_and_lock(self, name: str, amount: int) -> None:
        self.fund(name, amount)
        self.lock(name, amount)

    def sign_permit(
        self,
        name: str,
        amount: int,
        deadline: int,
        nonce: Optional[int] = None,
        spender: Optional[str] = None,
    ) -> Signature:
        """Sign a permit for the governance engine as ``name``."""
        owner = self.address(name)
        if nonce is None:
            nonce = self.token.nonces(owner)
        signer = PermitSigner(self.token.domain)
        return signer.sign(
            self.keys[name], spender or self.governance.address, amount, nonce, deadline
        )

    def deploy(self, contract: Contract, deployer: str = "deployer") -> str:
        return self.chain.deploy(contract, self.address(deployer))

    def propose(
        self,
        name: str = "proposer",
        target: Optional[str] = None,
        description: str = "proposal",
    ) -> int:
        if target is None:
            target = self.deploy(Dummy())
        return self.governance.propose(self.address(name), target, description)

    def move_to_active(self, proposal_id: int) -> None:
        proposal = self.governance.get_proposal(proposal_id)
        self.chain.set_timestamp(max(self.chain.timestamp, proposal.start_time + 1))

    def move_past_end(self, proposal_id: int) -> None:
        proposal = self.governance.get_proposal(proposal_id)
        self.chain.set_timestamp(max(self.chain.timestamp, proposal.end_time + 1))

    def move_to_execution(self, proposal_id: int) -> None:
        proposal = self.governance.get_proposal(proposal_id)
        target = proposal.end_time + self.config.execution_delay + 1
        self.chain.set_timestamp(max(self.chain.timestamp, target))

    def pass_proposal(self, proposal_id: int, voters: List[str]) -> None:
        """Vote "for" with every named voter and move to the execution window."""
        self.move_to_active(proposal_id)
        for name in voters:
            self.governance.cast_vote(self.address(name), proposal_id, True)
        self.move_to_execution(proposal_id)

    def events(self, name: Optional[str] = None) -> List[ContractEvent]:
        """Committed events emitted by the governance engine."""
        return self.chain.event_log.filter(address=self.governance.address, name=name)


def tokens(amount: int) -> int:
    """Whole tokens to base units."""
    return amount * TOKEN_UNIT
