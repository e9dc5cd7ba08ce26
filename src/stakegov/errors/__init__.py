"""StakeGov error handling.

Exception hierarchy shared by the governance engine, the token collaborator
and the simulated hosting chain.
"""

from .exceptions import (
    AlreadyActive,
    BelowThreshold,
    CapabilityRevoked,
    ConfigurationError,
    CryptographicError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    GovernanceError,
    InsufficientBalance,
    InvalidAuthorization,
    InvalidDelegatee,
    NotAContract,
    NotDelegate,
    NotExecutable,
    ProposalExecutionFailed,
    StakeGovError,
    TokenError,
    TokensLocked,
    Unauthorized,
    ValidationError,
    VotingClosed,
    ZeroBalance,
    create_validation_error,
)

__all__ = [
    "StakeGovError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    "ValidationError",
    "ConfigurationError",
    "CryptographicError",
    "TokenError",
    "GovernanceError",
    "Unauthorized",
    "CapabilityRevoked",
    "InvalidAuthorization",
    "InsufficientBalance",
    "TokensLocked",
    "BelowThreshold",
    "AlreadyActive",
    "NotAContract",
    "ZeroBalance",
    "VotingClosed",
    "NotDelegate",
    "InvalidDelegatee",
    "NotExecutable",
    "ProposalExecutionFailed",
    "create_validation_error",
]
