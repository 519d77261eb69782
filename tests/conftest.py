"""
Review Gate - Pytest Configuration and Fixtures

Shared fixtures and test configuration for all test modules.
"""

import os

# Add project root to path for imports
import sys
from typing import Any
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from adapters.base import GitPlatformAdapter  # noqa: E402
from fixtures.test_configs import sample_changed_files, sample_env, sample_reviews  # noqa: E402
from fixtures.webhook_payloads import (  # noqa: E402
    github_check_run_payload,
    github_pr_payload,
    github_push_payload,
    github_review_payload,
)
from models.platform import ChangedFile, PullRequestContext, Review  # noqa: E402
from services.stats import StatsAggregator  # noqa: E402


# =============================================================================
# Sample Webhook Payload Fixtures
# =============================================================================


@pytest.fixture
def pr_opened_payload() -> dict[str, Any]:
    """GitHub pull_request payload with action=opened."""
    return github_pr_payload("opened")


@pytest.fixture
def pr_closed_payload() -> dict[str, Any]:
    """GitHub pull_request payload with action=closed."""
    return github_pr_payload("closed")


@pytest.fixture
def review_submitted_payload() -> dict[str, Any]:
    """GitHub pull_request_review payload with action=submitted."""
    return github_review_payload("submitted", "approved")


@pytest.fixture
def check_run_payload() -> dict[str, Any]:
    """GitHub check_run payload."""
    return github_check_run_payload()


@pytest.fixture
def push_payload() -> dict[str, Any]:
    """GitHub push payload (acknowledged, not acted on)."""
    return github_push_payload()


# =============================================================================
# Pull Request Fixtures
# =============================================================================


@pytest.fixture
def pr_context() -> PullRequestContext:
    """Pull request identity used across service tests."""
    return PullRequestContext(owner="octocat", repo="test-repo", pr_number=42, head_sha="b" * 40)


@pytest.fixture
def changed_files() -> list[ChangedFile]:
    return sample_changed_files()


# =============================================================================
# Mock Adapter Fixtures
# =============================================================================


@pytest.fixture
def mock_adapter(changed_files) -> MagicMock:
    """
    Mock GitPlatformAdapter for testing.

    Defaults describe a PR with two approvals, a head SHA and the
    sample changed files. Tests override return values or side effects.
    """
    adapter = MagicMock(spec=GitPlatformAdapter)
    adapter.list_files.return_value = changed_files
    adapter.list_reviews.return_value = [Review(**review) for review in sample_reviews(2)]
    adapter.get_head_sha.return_value = "b" * 40
    adapter.create_status.return_value = None
    adapter.create_comment.return_value = None
    adapter.verify_signature.return_value = True
    return adapter


# =============================================================================
# Stats Fixtures
# =============================================================================


@pytest.fixture
def stats() -> StatsAggregator:
    aggregator = StatsAggregator(max_entries=100)
    yield aggregator
    aggregator.close()


# =============================================================================
# Environment Override Fixture
# =============================================================================


@pytest.fixture
def override_test_env(monkeypatch):
    """
    Override environment variables for testing.

    Ensures tests run with consistent test configuration regardless of
    any .env file or shell environment.
    """
    for key in (
        "THIRD_PARTY_WEBHOOK_URL",
        "VERIFY_WEBHOOK_SIGNATURE",
        "STATS_MAX_ENTRIES",
        "PORT",
        "STATUS_CONTEXT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    for key, value in sample_env().items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def test_config(override_test_env):
    """Config loaded from the test environment."""
    from utils.config import Config

    return Config()


# =============================================================================
# FastAPI Test Client Fixture
# =============================================================================


@pytest.fixture
def app(test_config, mock_adapter):
    """Application wired to the mock adapter."""
    from main import create_app

    return create_app(config=test_config, adapter=mock_adapter)


@pytest.fixture
def client(app):
    """
    FastAPI test client for endpoint testing.

    Runs the application lifespan so services are available.
    """
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    """
    Pytest configuration hook.

    Registers custom markers and test configuration.
    """
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "contract: mark test as contract/endpoint test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
