"""
Test fixtures package for Review Gate tests.

This package contains shared test fixtures used across unit, contract,
and integration tests.
"""

from .test_configs import (
    sample_changed_files,
    sample_env,
    sample_reviews,
)
from .webhook_payloads import (
    github_check_run_payload,
    github_pr_payload,
    github_push_payload,
    github_review_payload,
)

__all__ = [
    "github_check_run_payload",
    "github_pr_payload",
    "github_push_payload",
    "github_review_payload",
    "sample_changed_files",
    "sample_env",
    "sample_reviews",
]
