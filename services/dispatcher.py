"""
Webhook event parsing and dispatch.

parse_event() turns a raw delivery into one of the Event variants;
EventDispatcher routes each variant to the full gating pipeline, a
review-only re-evaluation, a stats-only update, or nothing.
"""

import json
import time
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import ValidationError

from models.checks import CheckResult
from models.events import (
    CheckRunObserved,
    Event,
    PullRequestUpdated,
    ReviewSubmitted,
    Unrecognized,
)
from services.merge_policy import MergePolicyEvaluator
from services.notifications import NotificationFanout, build_summary
from services.orchestrator import CheckOrchestrator
from services.publisher import StatusPublisher
from services.stats import StatsAggregator
from utils.metrics import pipeline_duration_seconds

PIPELINE_ACTIONS = ("opened", "synchronize")

# GitHub webhook event names that are acknowledged but not acted on
KNOWN_EVENT_TYPES = frozenset({
    "branch_protection_rule", "check_suite", "code_scanning_alert",
    "commit_comment", "content_reference", "create", "delete",
    "dependabot_alert", "deploy_key", "deployment",
    "deployment_protection_rule", "deployment_status", "discussion",
    "discussion_comment", "fork", "github_app_authorization", "gollum",
    "installation", "installation_repositories", "installation_target",
    "issue_comment", "issues", "label", "marketplace_purchase", "member",
    "membership", "merge_group", "meta", "milestone", "organization",
    "org_block", "package", "page_build", "personal_access_token_request",
    "ping", "project", "project_card", "project_column", "projects_v2",
    "projects_v2_item", "public", "pull_request_review_comment",
    "pull_request_review_thread", "pull_request_target", "push", "release",
    "repository", "repository_dispatch", "repository_import",
    "repository_vulnerability_alert", "secret_scanning_alert",
    "security_advisory", "security_and_analysis", "sponsorship", "star",
    "status", "team", "team_add", "user", "watch", "workflow_dispatch",
    "workflow_job", "workflow_run",
})


class WebhookParseError(ValueError):
    """Raised when a delivery cannot be turned into an Event."""


class DispatchOutcome(str, Enum):
    """What the dispatcher did with an event."""

    PIPELINE = "pipeline"
    REEVALUATED = "reevaluated"
    STATS_ONLY = "stats_only"
    IGNORED = "ignored"
    FAILED = "failed"  # unexpected error, logged by the caller


def _repository_identity(payload: dict[str, Any]) -> tuple[str, str]:
    try:
        repository = payload["repository"]
        return repository["owner"]["login"], repository["name"]
    except (KeyError, TypeError) as e:
        raise WebhookParseError(f"Missing repository in payload: {e}")


def _pull_request_number(payload: dict[str, Any]) -> int:
    try:
        number = payload["pull_request"]["number"]
    except (KeyError, TypeError) as e:
        raise WebhookParseError(f"Missing pull_request in payload: {e}")
    if not isinstance(number, int) or isinstance(number, bool) or number < 1:
        raise WebhookParseError(f"Invalid pull request number: {number!r}")
    return number


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a nested object, treating a missing or null one as empty."""
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise WebhookParseError(f"Field '{key}' must be a JSON object, got {type(value).__name__}")
    return value


def parse_event(event_type: str | None, payload: bytes) -> Event:
    """
    Parse a raw webhook delivery.

    Args:
        event_type: Value of the X-GitHub-Event header
        payload: Raw request body

    Returns:
        One of PullRequestUpdated, ReviewSubmitted, CheckRunObserved, Unrecognized

    Raises:
        WebhookParseError: If the discriminator or body cannot be parsed
    """
    event_type = (event_type or "").strip()
    if not event_type:
        raise WebhookParseError("Missing X-GitHub-Event header")

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise WebhookParseError(f"Invalid JSON payload: {e}")

    if not isinstance(data, dict):
        raise WebhookParseError("Webhook payload must be a JSON object")

    try:
        return _build_event(event_type, data)
    except ValidationError as e:
        raise WebhookParseError(f"Invalid {event_type} payload: {e}") from e


def _build_event(event_type: str, data: dict[str, Any]) -> Event:
    if event_type == "pull_request":
        owner, repo = _repository_identity(data)
        pr_number = _pull_request_number(data)
        head = _section(data["pull_request"], "head")
        return PullRequestUpdated(
            action=data.get("action") or "",
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            head_sha=head.get("sha") or "",
        )

    if event_type == "pull_request_review":
        owner, repo = _repository_identity(data)
        pr_number = _pull_request_number(data)
        review = _section(data, "review")
        user = _section(review, "user")
        return ReviewSubmitted(
            action=data.get("action") or "",
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            review_state=review.get("state") or "",
            reviewer=user.get("login") or "",
        )

    if event_type == "check_run":
        check_run = _section(data, "check_run")
        return CheckRunObserved(
            name=check_run.get("name") or "",
            status=check_run.get("status") or "",
        )

    if event_type in KNOWN_EVENT_TYPES:
        return Unrecognized(event_type=event_type)

    raise WebhookParseError(f"Unknown X-GitHub-Event in message: {event_type}")


class EventDispatcher:
    """
    Routes parsed events to the gating services.

    Holds no per-event state; every dispatch runs synchronously in the
    calling worker thread.
    """

    def __init__(
        self,
        orchestrator: CheckOrchestrator,
        merge_policy: MergePolicyEvaluator,
        publisher: StatusPublisher,
        stats: StatsAggregator,
        fanout: NotificationFanout,
        slack_channel: str | None = None,
        jira_project_key: str | None = None,
    ):
        self.orchestrator = orchestrator
        self.merge_policy = merge_policy
        self.publisher = publisher
        self.stats = stats
        self.fanout = fanout
        self.slack_channel = slack_channel
        self.jira_project_key = jira_project_key

    def dispatch(self, event: Event, received_at: float | None = None) -> DispatchOutcome:
        """
        Handle one event.

        Args:
            event: Parsed webhook event
            received_at: time.perf_counter() value taken when the request arrived

        Returns:
            The route taken
        """
        if received_at is None:
            received_at = time.perf_counter()

        if isinstance(event, PullRequestUpdated):
            if event.action not in PIPELINE_ACTIONS:
                logger.debug(f"Ignoring pull_request action '{event.action}'")
                return DispatchOutcome.IGNORED
            self.handle_pull_request(event, received_at)
            return DispatchOutcome.PIPELINE

        if isinstance(event, ReviewSubmitted):
            logger.info(f"Review event: {event.review_state} - {event.reviewer}")
            if event.action != "submitted":
                return DispatchOutcome.IGNORED
            self.handle_review(event)
            return DispatchOutcome.REEVALUATED

        if isinstance(event, CheckRunObserved):
            self.handle_check_run(event, received_at)
            return DispatchOutcome.STATS_ONLY

        if isinstance(event, Unrecognized):
            logger.debug(f"Ignoring unhandled event type '{event.event_type}'")
            return DispatchOutcome.IGNORED

        logger.warning(f"No handler for event {type(event).__name__}")
        return DispatchOutcome.IGNORED

    def handle_pull_request(self, event: PullRequestUpdated, received_at: float) -> list[CheckResult]:
        context = event.context()
        log = logger.bind(pr=context.key)
        log.info(f"Processing PR #{context.pr_number} in {context.full_name}")

        checks = self.orchestrator.run_all(context)
        decision = self.merge_policy.evaluate(context)
        verdict = self.publisher.publish(context, checks, decision)

        elapsed = time.perf_counter() - received_at
        self.stats.record_pr_processing(context.key, elapsed)
        pipeline_duration_seconds.labels(outcome=verdict.state.value).observe(elapsed)

        if self.fanout.enabled:
            summary = build_summary(
                context,
                checks,
                processing_seconds=elapsed,
                reviewers_count=self.merge_policy.min_reviewers,
                slack_channel=self.slack_channel,
                jira_project_key=self.jira_project_key,
            )
            self.fanout.submit(summary)

        log.bind(latency_ms=elapsed * 1000, status=verdict.state.value).info(
            f"Completed processing PR #{context.pr_number} in {elapsed:.3f}s"
        )
        return checks

    def handle_review(self, event: ReviewSubmitted) -> None:
        context = event.context()
        decision = self.merge_policy.evaluate(context)
        self.publisher.publish(context, [], decision)

    def handle_check_run(self, event: CheckRunObserved, received_at: float) -> None:
        logger.info(f"Check run event: {event.name} - {event.status}")
        if not event.name:
            return
        self.stats.record_check_time(event.name, time.perf_counter() - received_at)
