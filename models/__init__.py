"""
Models package for Review Gate.

Exports all Pydantic models for webhook events, check results,
merge decisions, notifications and stats.
"""

# Check models (results, merge decision, verdict)
from .checks import CheckResult, MergeDecision, Verdict

# Event models (closed variant set for inbound webhooks)
from .events import (
    CheckRunObserved,
    Event,
    PullRequestUpdated,
    ReviewSubmitted,
    Unrecognized,
)

# Notification models (third-party fanout payload)
from .notification import (
    CheckRunEntry,
    JiraIntegration,
    ProcessingSummary,
    SlackNotification,
    ThirdPartyHooks,
)
from .platform import ChangedFile, CheckStatus, PullRequestContext, Review, StatusState
from .stats import StatsSnapshot

__all__ = [
    # Platform
    "CheckStatus",
    "StatusState",
    "PullRequestContext",
    "ChangedFile",
    "Review",
    # Events
    "Event",
    "PullRequestUpdated",
    "ReviewSubmitted",
    "CheckRunObserved",
    "Unrecognized",
    # Checks
    "CheckResult",
    "MergeDecision",
    "Verdict",
    # Notification
    "CheckRunEntry",
    "SlackNotification",
    "JiraIntegration",
    "ThirdPartyHooks",
    "ProcessingSummary",
    # Stats
    "StatsSnapshot",
]
