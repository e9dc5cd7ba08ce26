"""Shared pytest fixtures for StakeGov tests."""

import logging

logger = logging.getLogger(__name__)
import pytest

from stakegov.logging import shutdown_logging
from stakegov.testing import GovernanceFixture, tokens


@pytest.fixture(autouse=True)
def _reset_structured_logging():
    yield
    shutdown_logging()


@pytest.fixture
def env():
    """Fresh chain with token, governance engine and funded proposer."""
    fixture = GovernanceFixture()
    fixture.fund_and_lock("proposer", fixture.token.cap // 4)
    return fixture


@pytest.fixture
def bare_env():
    """Fresh deployment where nobody has locked anything yet."""
    return GovernanceFixture()


@pytest.fixture
def quorum():
    return tokens(25_000)
