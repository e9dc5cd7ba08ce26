"""
Capped ERC-20 governance token with EIP-2612 permits.

All balances, allowances and permit nonces live in ``TokenState`` so the
hosting chain can roll them back with the rest of a failed transaction.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..crypto.permit import PermitDomain, SignatureVerifier
from ..crypto.signatures import Signature
from ..errors.exceptions import TokenError, ValidationError
from ..vm.contract import ZERO_ADDRESS, Contract, normalize_address
from ..vm.gas_meter import GasCost
from .base import TokenInterface

DECIMALS = 18
DEFAULT_CAP = 10_000_000 * 10**DECIMALS


@dataclass
class TokenState:
    total_supply: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)
    nonces: Dict[str, int] = field(default_factory=dict)


class GovernanceToken(Contract, TokenInterface):
    """Governance token whose whole supply is distributed at deployment."""

    def __init__(
        self,
        name: str = "StakeGov",
        symbol: str = "SGOV",
        cap: int = DEFAULT_CAP,
        distribution: Optional[Dict[str, int]] = None,
    ):
        super().__init__()
        if cap <= 0:
            raise ValidationError("token cap must be positive", field="cap")
        self.name = name
        self.symbol = symbol
        self.decimals = DECIMALS
        self.cap = cap
        self._distribution = dict(distribution or {})
        self.state = TokenState()
        self._verifier: Optional[SignatureVerifier] = None

    def on_deploy(self, deployer: str) -> None:
        for account, amount in self._distribution.items():
            self._mint(normalize_address(account, "distribution"), amount)
        self._verifier = SignatureVerifier(
            PermitDomain(self.name, self.chain.chain_id, self.address)
        )

    @property
    def domain(self) -> PermitDomain:
        return self._verifier.domain

    @property
    def total_supply(self) -> int:
        return self.state.total_supply

    def balance_of(self, account: str) -> int:
        return self.state.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.state.allowances.get(owner, {}).get(spender, 0)

    def nonces(self, owner: str) -> int:
        return self.state.nonces.get(owner, 0)

    def approve(self, sender: str, spender: str, amount: int) -> bool:
        with self.chain.transaction(sender):
            self._approve(
                normalize_address(sender, "sender"),
                normalize_address(spender, "spender"),
                amount,
            )
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        with self.chain.transaction(sender):
            self._transfer(
                normalize_address(sender, "sender"), normalize_address(to, "to"), amount
            )
        return True

    def transfer_from(self, sender: str, owner: str, to: str, amount: int) -> bool:
        sender = normalize_address(sender, "sender")
        owner = normalize_address(owner, "owner")
        with self.chain.transaction(sender):
            allowed = self.allowance(owner, sender)
            if allowed < amount:
                raise TokenError(
                    f"transfer amount {amount} exceeds allowance {allowed}",
                    account=owner,
                )
            self._approve(owner, sender, allowed - amount)
            self._transfer(owner, normalize_address(to, "to"), amount)
        return True

    def permit(
        self,
        sender: str,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
    ) -> None:
        """Approve ``spender`` from ``owner``'s signature, consuming a nonce."""
        owner = normalize_address(owner, "owner")
        spender = normalize_address(spender, "spender")
        with self.chain.transaction(sender):
            self.chain.consume_gas(GasCost.ECRECOVER)
            self._verifier.verify_and_consume(
                self.state.nonces,
                owner,
                spender,
                value,
                self.nonces(owner),
                deadline,
                signature,
                self.now,
            )
            self._approve(owner, spender, value)

    def _mint(self, account: str, amount: int) -> None:
        if amount < 0:
            raise TokenError("cannot mint a negative amount", account=account)
        if self.state.total_supply + amount > self.cap:
            raise TokenError(f"minting {amount} exceeds the cap of {self.cap}")
        self.state.total_supply += amount
        self.state.balances[account] = self.balance_of(account) + amount

    def _approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise TokenError("allowance must be non-negative", account=owner)
        self.chain.consume_gas(GasCost.SSTORE)
        self.state.allowances.setdefault(owner, {})[spender] = amount
        self.emit("Approval", owner=owner, spender=spender, value=amount)

    def _transfer(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise TokenError("transfer amount must be non-negative", account=sender)
        if to == ZERO_ADDRESS:
            raise TokenError("transfer to the zero address", account=sender)
        balance = self.balance_of(sender)
        if balance < amount:
            raise TokenError(
                f"transfer amount {amount} exceeds balance {balance}", account=sender
            )
        self.chain.consume_gas(GasCost.SSTORE)
        self.state.balances[sender] = balance - amount
        self.state.balances[to] = self.balance_of(to) + amount
        self.emit("Transfer", sender=sender, to=to, value=amount)
