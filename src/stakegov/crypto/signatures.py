"""
Secp256k1 keys and recoverable signatures.

Key material is generated with ``cryptography``; signing and address
recovery go through ``eth_account`` so signatures are interchangeable with
any Ethereum wallet.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import Tuple, Union

from cryptography.hazmat.primitives.asymmetric import ec
from eth_account import Account
from eth_account.messages import SignableMessage

from .hashing import Keccak256Hasher

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class PrivateKey:
    """Immutable secp256k1 private key."""

    secret: bytes

    def __post_init__(self) -> None:
        if len(self.secret) != 32:
            raise ValueError("Private key must be exactly 32 bytes")
        value = int.from_bytes(self.secret, byteorder="big")
        if not 0 < value < SECP256K1_ORDER:
            raise ValueError("Private key is outside the secp256k1 range")

    @classmethod
    def generate(cls) -> "PrivateKey":
        """Generate a new random private key."""
        key = ec.generate_private_key(ec.SECP256K1())
        value = key.private_numbers().private_value
        return cls(value.to_bytes(32, byteorder="big"))

    @classmethod
    def from_seed(cls, seed: Union[bytes, str]) -> "PrivateKey":
        """Derive a deterministic key from a seed (test accounts)."""
        digest = Keccak256Hasher.hash(seed).to_int()
        value = digest % (SECP256K1_ORDER - 1) + 1
        return cls(value.to_bytes(32, byteorder="big"))

    @classmethod
    def from_hex(cls, hex_string: str) -> "PrivateKey":
        """Create a private key from hexadecimal string."""
        if hex_string.startswith("0x"):
            hex_string = hex_string[2:]
        return cls(bytes.fromhex(hex_string))

    def to_hex(self) -> str:
        """Convert private key to hexadecimal string."""
        return self.secret.hex()

    @property
    def address(self) -> str:
        """Checksummed account address controlled by this key."""
        return Account.from_key(self.secret).address

    def sign(self, message: SignableMessage) -> "Signature":
        """Sign an EIP-191/EIP-712 signable message."""
        signed = Account.sign_message(message, private_key=self.secret)
        return Signature(v=signed.v, r=signed.r, s=signed.s)

    def __repr__(self) -> str:
        return f"PrivateKey(address={self.address})"


@dataclass(frozen=True)
class Signature:
    """Recoverable ECDSA signature in (v, r, s) form."""

    v: int
    r: int
    s: int

    def __post_init__(self) -> None:
        if self.v not in (27, 28):
            raise ValueError("Signature v must be 27 or 28")
        if not (0 < self.r < SECP256K1_ORDER and 0 < self.s < SECP256K1_ORDER):
            raise ValueError("Signature components must be within the curve order")

    @classmethod
    def from_bytes(cls, signature_bytes: bytes) -> "Signature":
        """Create a signature from 65 bytes laid out as r || s || v."""
        if len(signature_bytes) != 65:
            raise ValueError("Signature must be exactly 65 bytes")

        r = int.from_bytes(signature_bytes[:32], byteorder="big")
        s = int.from_bytes(signature_bytes[32:64], byteorder="big")
        v = signature_bytes[64]
        if v < 27:
            v += 27
        return cls(v, r, s)

    @classmethod
    def from_hex(cls, hex_string: str) -> "Signature":
        """Create a signature from hexadecimal string."""
        if hex_string.startswith("0x"):
            hex_string = hex_string[2:]
        return cls.from_bytes(bytes.fromhex(hex_string))

    def to_bytes(self) -> bytes:
        """Convert signature to r || s || v bytes."""
        return (
            self.r.to_bytes(32, byteorder="big")
            + self.s.to_bytes(32, byteorder="big")
            + bytes([self.v])
        )

    def to_hex(self) -> str:
        """Convert signature to 0x-prefixed hexadecimal string."""
        return "0x" + self.to_bytes().hex()

    @property
    def vrs(self) -> Tuple[int, int, int]:
        return (self.v, self.r, self.s)
