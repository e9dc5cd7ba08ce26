"""
Unit tests for the StakeGov exception hierarchy.
"""

import logging

logger = logging.getLogger(__name__)
import pytest

from stakegov.errors import (
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
    TokensLocked,
    Unauthorized,
    ValidationError,
    VotingClosed,
    ZeroBalance,
    create_validation_error,
)


class TestStakeGovError:
    """Test the base error."""

    def test_defaults(self):
        """Test default attributes."""
        error = StakeGovError("boom")

        assert error.message == "boom"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.SYSTEM
        assert isinstance(error.context, ErrorContext)
        assert str(error) == "StakeGovError: boom"

    def test_to_dict(self):
        """Test dictionary conversion."""
        cause = RuntimeError("root cause")
        error = StakeGovError(
            "boom",
            error_code="E1",
            context=ErrorContext(component="ledger", operation="unlock"),
            cause=cause,
            metadata={"amount": 5},
        )

        data = error.to_dict()
        assert data["type"] == "StakeGovError"
        assert data["error_code"] == "E1"
        assert data["cause"] == "root cause"
        assert data["context"]["component"] == "ledger"
        assert data["metadata"] == {"amount": 5}

    def test_str_includes_code_and_severity(self):
        """Test string form with non-default fields."""
        error = StakeGovError("boom", error_code="E2", severity=ErrorSeverity.HIGH)

        assert "Code: E2" in str(error)
        assert "Severity: high" in str(error)


class TestGovernanceErrors:
    """Test the governance error taxonomy."""

    @pytest.mark.parametrize(
        "error_class",
        [
            InsufficientBalance,
            TokensLocked,
            BelowThreshold,
            AlreadyActive,
            NotAContract,
            ZeroBalance,
            VotingClosed,
            NotDelegate,
            InvalidDelegatee,
            NotExecutable,
            ProposalExecutionFailed,
        ],
    )
    def test_taxonomy_is_governance_error(self, error_class):
        """Test every rule violation is a GovernanceError."""
        error = error_class("nope", proposal_id=3, account="0xabc")

        assert isinstance(error, GovernanceError)
        assert isinstance(error, StakeGovError)
        assert error.to_dict()["proposal_id"] == 3
        assert error.to_dict()["account"] == "0xabc"

    def test_invalid_authorization_is_cryptographic(self):
        """Test signature failures are cryptographic errors."""
        error = InvalidAuthorization("bad signature")

        assert isinstance(error, CryptographicError)
        assert error.category == ErrorCategory.CRYPTOGRAPHIC
        assert error.severity == ErrorSeverity.HIGH

    def test_execution_failure_category(self):
        """Test payload failures carry the execution category."""
        error = ProposalExecutionFailed("payload failed", proposal_id=1)

        assert error.category == ErrorCategory.EXECUTION
        assert error.severity == ErrorSeverity.HIGH

    def test_capability_revoked_is_unauthorized(self):
        """Test a revoked context reports an authorization failure."""
        error = CapabilityRevoked("revoked")

        assert isinstance(error, Unauthorized)
        assert error.category == ErrorCategory.AUTHORIZATION


class TestValidationErrors:
    """Test validation and configuration errors."""

    def test_create_validation_error(self):
        """Test the validation error helper."""
        error = create_validation_error("amount", -1, "positive")

        assert isinstance(error, ValidationError)
        assert error.field == "amount"
        assert "expected positive" in error.message
        assert error.to_dict()["value"] == "-1"

    def test_configuration_error_parameter(self):
        """Test configuration errors name the parameter."""
        error = ConfigurationError("bad", parameter="voting_period")

        assert error.category == ErrorCategory.CONFIGURATION
        assert error.to_dict()["parameter"] == "voting_period"
