"""Cryptographic primitives for StakeGov."""

from .hashing import Hash, Keccak256Hasher, SHA256Hasher
from .permit import Permit, PermitDomain, PermitSigner, SignatureVerifier
from .signatures import PrivateKey, Signature

__all__ = [
    "Hash",
    "SHA256Hasher",
    "Keccak256Hasher",
    "PrivateKey",
    "Signature",
    "Permit",
    "PermitDomain",
    "PermitSigner",
    "SignatureVerifier",
]
