"""Exception hierarchy for StakeGov.

This module defines the exception hierarchy used across the governance
engine, its simulated hosting chain and its token collaborator. Every
failure is raised synchronously; the enclosing chain transaction restores
state, so an exception always means "nothing happened".
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    CRYPTOGRAPHIC = "cryptographic"
    CONFIGURATION = "configuration"
    TOKEN = "token"
    GOVERNANCE = "governance"
    AUTHORIZATION = "authorization"
    EXECUTION = "execution"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    component: Optional[str] = None
    operation: Optional[str] = None
    account: Optional[str] = None
    proposal_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "component": self.component,
            "operation": self.operation,
            "account": self.account,
            "proposal_id": self.proposal_id,
            "metadata": self.metadata,
        }


class StakeGovError(Exception):
    """Base exception for all StakeGov errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.metadata = metadata or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        return " | ".join(parts)


class ValidationError(StakeGovError):
    """Validation error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert validation error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class ConfigurationError(StakeGovError):
    """Invalid governance or logging configuration."""

    def __init__(self, message: str, parameter: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)
        self.parameter = parameter

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"parameter": self.parameter})
        return data


class CryptographicError(StakeGovError):
    """Cryptographic error."""

    def __init__(
        self,
        message: str,
        algorithm: Optional[str] = None,
        key_type: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.CRYPTOGRAPHIC)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)
        self.algorithm = algorithm
        self.key_type = key_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert cryptographic error to dictionary."""
        data = super().to_dict()
        data.update({"algorithm": self.algorithm, "key_type": self.key_type})
        return data


class TokenError(StakeGovError):
    """Token transfer, allowance or supply failure."""

    def __init__(self, message: str, account: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.TOKEN)
        super().__init__(message, **kwargs)
        self.account = account


class GovernanceError(StakeGovError):
    """Base class for governance rule violations."""

    def __init__(
        self,
        message: str,
        proposal_id: Optional[int] = None,
        account: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.GOVERNANCE)
        super().__init__(message, **kwargs)
        self.proposal_id = proposal_id
        self.account = account

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"proposal_id": self.proposal_id, "account": self.account})
        return data


class InvalidAuthorization(CryptographicError):
    """Bad, expired or replayed signed authorization."""


class InsufficientBalance(GovernanceError):
    """Unlock amount exceeds the locked stake."""


class TokensLocked(GovernanceError):
    """Unlock attempted during a live proposal or the lock window."""


class BelowThreshold(GovernanceError):
    """Locked balance is below the proposal threshold."""


class AlreadyActive(GovernanceError):
    """Proposer already has a pending or active proposal."""


class NotAContract(GovernanceError):
    """Target address has no code."""


class ZeroBalance(GovernanceError):
    """Voter has no locked balance."""


class VotingClosed(GovernanceError):
    """Vote cast outside the active window."""


class NotDelegate(GovernanceError):
    """Caller is not the recorded delegate of the account."""


class InvalidDelegatee(GovernanceError):
    """Self-delegation, no-op re-delegation or a reserved address."""


class NotExecutable(GovernanceError):
    """Proposal is not in an executable state."""


class ProposalExecutionFailed(GovernanceError):
    """The proposal payload raised during execution."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.EXECUTION)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class Unauthorized(StakeGovError):
    """Caller lacks the role required for the operation."""

    def __init__(self, message: str, caller: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.AUTHORIZATION)
        super().__init__(message, **kwargs)
        self.caller = caller


class CapabilityRevoked(Unauthorized):
    """An execution context was used after its call returned."""


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Create a validation error."""
    if message is None:
        message = f"Invalid value for field '{field}': expected {expected}, got {value}"

    return ValidationError(message=message, field=field, value=value, expected=expected)
