"""
Permit-style signed authorizations.

An EIP-712 structured message ``Permit(owner, spender, value, nonce,
deadline)`` bound to a ``{name, version, chainId, verifyingContract}``
domain replaces a separate on-chain approval transaction.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Union

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_keys.exceptions import BadSignature
from eth_utils import is_address, to_checksum_address

from ..errors.exceptions import InvalidAuthorization, ValidationError
from .signatures import PrivateKey, Signature

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

PERMIT_TYPE = [
    {"name": "owner", "type": "address"},
    {"name": "spender", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


@dataclass(frozen=True)
class PermitDomain:
    """Structured-data domain bound into every permit digest."""

    name: str
    chain_id: int
    verifying_contract: str
    version: str = "1"

    def __post_init__(self) -> None:
        if not is_address(self.verifying_contract):
            raise ValidationError(
                "verifying contract must be an address",
                field="verifying_contract",
                value=self.verifying_contract,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": to_checksum_address(self.verifying_contract),
        }


@dataclass(frozen=True)
class Permit:
    """Authorization for ``spender`` to move ``value`` of ``owner``'s tokens."""

    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int

    def __post_init__(self) -> None:
        for name in ("value", "nonce", "deadline"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must be non-negative", field=name)

    def to_message(self) -> Dict[str, Any]:
        return {
            "owner": to_checksum_address(self.owner),
            "spender": to_checksum_address(self.spender),
            "value": self.value,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }

    def signable(self, domain: PermitDomain) -> SignableMessage:
        """Encode the permit as an EIP-712 signable message."""
        return encode_typed_data(
            full_message={
                "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, "Permit": PERMIT_TYPE},
                "primaryType": "Permit",
                "domain": domain.to_dict(),
                "message": self.to_message(),
            }
        )


class PermitSigner:
    """Client-side helper producing permit signatures."""

    def __init__(self, domain: PermitDomain):
        self.domain = domain

    def sign(
        self,
        key: PrivateKey,
        spender: str,
        value: int,
        nonce: int,
        deadline: int,
    ) -> Signature:
        permit = Permit(key.address, spender, value, nonce, deadline)
        return key.sign(permit.signable(self.domain))


class SignatureVerifier:
    """
    Validates permits and consumes the holder's nonce.

    Nonces are held by the caller (the token contract's state) and passed in,
    so they are rolled back together with the rest of the transaction.
    """

    def __init__(self, domain: PermitDomain):
        self.domain = domain

    def recover(self, permit: Permit, signature: Union[Signature, bytes, str]) -> str:
        """Recover the signer address of a permit."""
        sig = _coerce_signature(signature)
        try:
            return Account.recover_message(
                permit.signable(self.domain), vrs=sig.vrs
            )
        except (BadSignature, ValueError) as e:
            raise InvalidAuthorization(
                "signature could not be recovered", algorithm="secp256k1", cause=e
            )

    def verify_and_consume(
        self,
        nonces: MutableMapping[str, int],
        holder: str,
        spender: str,
        amount: int,
        nonce: int,
        deadline: int,
        signature: Union[Signature, bytes, str],
        now: int,
    ) -> bool:
        """
        Verify a permit and increment the holder's nonce.

        Args:
            nonces: Per-holder nonce mapping owned by the verifying contract
            holder: Account that signed the permit
            spender: Account authorized to move the tokens
            amount: Authorized value
            nonce: Nonce the permit was signed with
            deadline: Last timestamp at which the permit is valid
            signature: Recoverable signature over the typed-data digest
            now: Current chain timestamp

        Returns:
            True on success

        Raises:
            InvalidAuthorization: on nonce mismatch, expiry or wrong signer
        """
        holder = to_checksum_address(holder)
        expected_nonce = nonces.get(holder, 0)
        if nonce != expected_nonce:
            raise InvalidAuthorization(
                f"invalid nonce {nonce}, expected {expected_nonce}",
                metadata={"holder": holder},
            )
        if now > deadline:
            raise InvalidAuthorization(
                "permit deadline has passed", metadata={"deadline": deadline}
            )

        permit = Permit(holder, spender, amount, nonce, deadline)
        signer = self.recover(permit, signature)
        if signer != holder:
            raise InvalidAuthorization(
                "invalid signature", metadata={"holder": holder, "signer": signer}
            )

        nonces[holder] = expected_nonce + 1
        logger.debug(f"Permit consumed for {holder} (nonce {nonce})")
        return True


def _coerce_signature(signature: Union[Signature, bytes, str]) -> Signature:
    if isinstance(signature, Signature):
        return signature
    try:
        if isinstance(signature, str):
            return Signature.from_hex(signature)
        return Signature.from_bytes(bytes(signature))
    except ValueError as e:
        raise InvalidAuthorization("malformed signature", cause=e)
