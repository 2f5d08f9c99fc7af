"""Shared pytest fixtures and configuration.

Loaded automatically by pytest; provides fixtures for all tests.
"""

import os

import pytest
from hypothesis import HealthCheck, settings

from tests.helpers import address

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=50,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Address Fixtures
# =============================================================================


@pytest.fixture
def pool_a() -> str:
    return address(0xA)


@pytest.fixture
def pool_b() -> str:
    return address(0xB)


@pytest.fixture
def escrow_account() -> str:
    return address(0xE5C)


@pytest.fixture
def alice() -> str:
    return address(0xA11CE)


@pytest.fixture
def bob() -> str:
    return address(0xB0B)


@pytest.fixture
def time_unit_mint() -> str:
    return address(0x7111E)
