"""
Review Gate - Services Layer

Business logic for pull request gating:
- EventDispatcher: webhook parsing and routing
- CheckOrchestrator: sequential check execution
- MergePolicyEvaluator: approvals and head commit gate
- StatusPublisher: commit status and summary comment
- StatsAggregator: shared timing statistics
- NotificationFanout: third-party summary delivery
"""

from services.dispatcher import (
    DispatchOutcome,
    EventDispatcher,
    WebhookParseError,
    parse_event,
)
from services.merge_policy import MergePolicyEvaluator
from services.notifications import NotificationFanout, build_summary
from services.orchestrator import CheckOrchestrator
from services.publisher import StatusPublisher, derive_verdict, render_comment
from services.stats import StatsAggregator

__all__ = [
    "CheckOrchestrator",
    "DispatchOutcome",
    "EventDispatcher",
    "MergePolicyEvaluator",
    "NotificationFanout",
    "StatsAggregator",
    "StatusPublisher",
    "WebhookParseError",
    "build_summary",
    "derive_verdict",
    "parse_event",
    "render_comment",
]
