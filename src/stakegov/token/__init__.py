"""Token collaborator of the governance engine."""

from .base import TokenInterface
from .erc20 import DECIMALS, DEFAULT_CAP, GovernanceToken, TokenState

__all__ = ["TokenInterface", "GovernanceToken", "TokenState", "DECIMALS", "DEFAULT_CAP"]
