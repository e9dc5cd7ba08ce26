"""
Contract base class and event records for the simulated hosting chain.

A contract keeps every piece of mutable data in ``self.state``; that object
is what the chain snapshots and restores around each transaction, so
anything stored elsewhere on the instance survives a revert.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

from eth_utils import is_address, to_checksum_address

from ..errors.exceptions import StakeGovError, ValidationError

if TYPE_CHECKING:
    from .chain import Chain

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def normalize_address(value: Any, field_name: str = "address") -> str:
    """Return the checksummed form of an address or raise ``ValidationError``."""
    if not isinstance(value, str) or not is_address(value):
        raise ValidationError(
            f"invalid address for {field_name}: {value!r}", field=field_name, value=value
        )
    return to_checksum_address(value)


@dataclass
class ContractEvent:
    """Log record emitted by a contract."""

    address: str
    name: str
    args: Dict[str, Any]
    timestamp: int
    tx_index: int
    log_index: int
    sender: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary."""
        return {
            "address": self.address,
            "name": self.name,
            "args": dict(self.args),
            "timestamp": self.timestamp,
            "tx_index": self.tx_index,
            "log_index": self.log_index,
            "sender": self.sender,
        }

    def matches_filter(
        self, address: Optional[str] = None, name: Optional[str] = None
    ) -> bool:
        """Check if event matches filter criteria."""
        if address and self.address != address:
            return False
        if name and self.name != name:
            return False
        return True


class Contract:
    """Base class for contracts deployed on a ``Chain``."""

    def __init__(self):
        self.address: Optional[str] = None
        self.chain: Optional["Chain"] = None
        self.state: Any = None

    @property
    def deployed(self) -> bool:
        return self.chain is not None

    def attach(self, chain: "Chain", address: str) -> None:
        if self.chain is not None:
            raise StakeGovError(f"contract already deployed at {self.address}")
        self.chain = chain
        self.address = address

    def on_deploy(self, deployer: str) -> None:
        """Hook run inside the deployment transaction."""

    @property
    def now(self) -> int:
        return self._require_chain().timestamp

    def emit(self, event: str, **args: Any) -> None:
        self._require_chain().emit(self.address, event, **args)

    def _require_chain(self) -> "Chain":
        if self.chain is None:
            raise StakeGovError(f"{self.__class__.__name__} is not deployed")
        return self.chain

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"
