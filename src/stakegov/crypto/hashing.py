"""
Hash functions and utilities for StakeGov.

Keccak-256 is used for anything that must match Ethereum tooling (contract
addresses, typed-data digests); SHA-256 is used for the local audit trail.
"""

import logging

logger = logging.getLogger(__name__)
import hashlib
import json
from dataclasses import dataclass
from typing import Any, List, Union

from eth_utils import keccak


@dataclass(frozen=True)
class Hash:
    """Immutable 32-byte hash value."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 32:
            raise ValueError("Hash must be exactly 32 bytes")

    def __str__(self) -> str:
        return self.value.hex()

    def __repr__(self) -> str:
        return f"Hash('{self.value.hex()}')"

    @classmethod
    def from_hex(cls, hex_string: str) -> "Hash":
        """Create a Hash from a hexadecimal string."""
        if hex_string.startswith("0x"):
            hex_string = hex_string[2:]
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def zero(cls) -> "Hash":
        """Create a zero hash (all zeros)."""
        return cls(b"\x00" * 32)

    def to_hex(self) -> str:
        """Convert hash to hexadecimal string."""
        return self.value.hex()

    def to_int(self) -> int:
        """Convert hash to integer (big-endian)."""
        return int.from_bytes(self.value, byteorder="big")


def _to_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


class SHA256Hasher:
    """SHA-256 hasher used for audit records."""

    @staticmethod
    def hash(data: Union[bytes, str]) -> Hash:
        """
        Hash data using SHA-256.

        Args:
            data: Data to hash (bytes or string)

        Returns:
            Hash object containing the SHA-256 hash
        """
        return Hash(hashlib.sha256(_to_bytes(data)).digest())

    @staticmethod
    def hash_json(payload: Any) -> Hash:
        """Hash the canonical (sorted-key) JSON encoding of a payload."""
        encoded = json.dumps(payload, sort_keys=True, default=str)
        return SHA256Hasher.hash(encoded)


class Keccak256Hasher:
    """Keccak-256 hasher compatible with the Ethereum toolchain."""

    @staticmethod
    def hash(data: Union[bytes, str]) -> Hash:
        """Hash data using Keccak-256."""
        return Hash(keccak(_to_bytes(data)))

    @staticmethod
    def hash_list(items: List[Union[bytes, str]]) -> Hash:
        """Hash the concatenation of several items."""
        return Keccak256Hasher.hash(b"".join(_to_bytes(item) for item in items))
