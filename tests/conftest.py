"""Shared pytest fixtures for all test files."""

import os

# Settings are read at import time; give every required variable a value first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:5173")
os.environ.setdefault("RATE_LIMIT_TIMES", "100")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("TRUST_PROXY", "false")
os.environ.setdefault("ANTHROPIC_API_URL", "https://api.anthropic.test/v1/messages")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ.setdefault("ANTHROPIC_MODEL", "test-model")
os.environ.setdefault("ANTHROPIC_VERSION", "2023-06-01")

import pytest

from helpers import FakeAudit, FakeCompletion, fragment, index_of


@pytest.fixture
def knee_index():
    """Query vector [1, 0, 0] scores the knee exclusion clause highest."""
    return index_of(
        fragment(
            "policy.pdf",
            "policy.pdf::4",
            "Knee surgery and joint replacement are excluded during the first 24 months of cover.",
            [0.9, 0.1, 0.0],
        ),
        fragment(
            "policy.pdf",
            "policy.pdf::7",
            "Hospitalisation in any network hospital across India is covered.",
            [0.3, 0.95, 0.0],
        ),
        fragment(
            "brochure.pdf",
            "brochure.pdf::1",
            "Customer care is available around the clock.",
            [0.0, 0.0, 1.0],
        ),
    )


@pytest.fixture
def audit():
    return FakeAudit()


@pytest.fixture
def completion():
    return FakeCompletion()
