"""
Status publication.

Turns check results and the merge decision into a commit status and a
summary comment on the pull request. Publication is best effort: every
failure is logged and counted, never retried and never raised.
"""

from loguru import logger

from adapters.base import GitPlatformAdapter, PlatformAPIError
from models.checks import CheckResult, MergeDecision, Verdict
from models.platform import CheckStatus, PullRequestContext, StatusState
from utils.metrics import publication_failures_total

STATUS_MARKERS = {
    CheckStatus.SUCCESS: "✅",
    CheckStatus.WARNING: "⚠️",
    CheckStatus.FAILURE: "❌",
    CheckStatus.ERROR: "🔴",
    CheckStatus.SKIPPED: "⏭️",
}

COMMENT_HEADER = "## 🤖 Automated Review Results"
COMMENT_FOOTER = "*This comment was generated automatically by the Review Bot*"


def derive_verdict(checks: list[CheckResult], decision: MergeDecision) -> Verdict:
    """
    Derive the overall commit status.

    An unmet merge policy always yields pending, whatever the checks say.
    """
    if not decision.allowed:
        return Verdict(state=StatusState.PENDING, description=decision.reason)

    if any(check.status == CheckStatus.FAILURE for check in checks):
        return Verdict(state=StatusState.FAILURE, description="Some checks failed")

    return Verdict(state=StatusState.SUCCESS, description="All checks passed - ready to merge")


def render_comment(checks: list[CheckResult], decision: MergeDecision, verdict: Verdict) -> str:
    """Render the PR comment body: one line per check, then the merge verdict."""
    lines = [COMMENT_HEADER, "", "### Check Results:"]
    if not checks:
        lines.append("_No checks were run for this event._")
    for check in checks:
        marker = STATUS_MARKERS[check.status]
        lines.append(f"- {marker} **{check.name}**: {check.message} ({check.time})")

    lines.extend(["", "### Merge Status:"])
    if verdict.state == StatusState.SUCCESS:
        lines.append(f"✅ **Ready to merge** - {decision.reason}")
    elif verdict.state == StatusState.FAILURE:
        lines.append(f"❌ **Not ready to merge** - {verdict.description}")
    else:
        lines.append(f"⏳ **Not ready to merge** - {decision.reason}")

    lines.extend(["", "---", COMMENT_FOOTER])
    return "\n".join(lines)


class StatusPublisher:
    """Publishes the gating verdict to the hosting platform."""

    def __init__(self, adapter: GitPlatformAdapter, status_context: str = "ci/review-bot"):
        self.adapter = adapter
        self.status_context = status_context

    def publish(
        self,
        context: PullRequestContext,
        checks: list[CheckResult],
        decision: MergeDecision,
    ) -> Verdict:
        """
        Publish commit status and summary comment.

        The two effects are independent; a failure of one does not
        prevent the other.

        Returns:
            The derived verdict, for logging and tests
        """
        verdict = derive_verdict(checks, decision)

        self._publish_status(context, verdict)
        self._publish_comment(context, render_comment(checks, decision, verdict))

        return verdict

    def _publish_status(self, context: PullRequestContext, verdict: Verdict) -> None:
        sha = context.head_sha
        if not sha:
            try:
                sha = self.adapter.get_head_sha(context)
            except PlatformAPIError as e:
                publication_failures_total.labels(operation="status").inc()
                logger.error(f"Failed to get PR for status update on {context.key}: {e}")
                return

        if not sha:
            logger.warning(f"No head SHA for {context.key}, skipping commit status")
            return

        try:
            self.adapter.create_status(
                context,
                sha=sha,
                state=verdict.state.value,
                description=verdict.description,
                status_context=self.status_context,
            )
        except PlatformAPIError as e:
            publication_failures_total.labels(operation="status").inc()
            logger.error(f"Failed to create status on {context.key}: {e}")

    def _publish_comment(self, context: PullRequestContext, body: str) -> None:
        try:
            self.adapter.create_comment(context, body)
        except PlatformAPIError as e:
            publication_failures_total.labels(operation="comment").inc()
            logger.error(f"Failed to create comment on {context.key}: {e}")
