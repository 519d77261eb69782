"""
Merge policy evaluation.

A pull request may merge once it has enough approving reviews and the
platform reports a head commit to attach the status to. Check results
play no part here.
"""

from loguru import logger

from adapters.base import GitPlatformAdapter, PlatformAPIError
from models.checks import MergeDecision
from models.platform import PullRequestContext, Review
from utils.metrics import merge_decisions_total

APPROVED_STATE = "APPROVED"


def count_approvals(reviews: list[Review]) -> int:
    """
    Count approving reviews.

    Counted per review record: a reviewer who approved twice counts twice.
    """
    return sum(1 for review in reviews if review.state.upper() == APPROVED_STATE)


class MergePolicyEvaluator:
    """Evaluates the approval and head-commit gate for one pull request."""

    def __init__(self, adapter: GitPlatformAdapter, min_reviewers: int):
        self.adapter = adapter
        self.min_reviewers = min_reviewers

    def evaluate(self, context: PullRequestContext) -> MergeDecision:
        decision = self._evaluate(context)
        merge_decisions_total.labels(allowed=str(decision.allowed).lower()).inc()
        logger.info(f"Merge policy for {context.key}: allowed={decision.allowed} ({decision.reason})")
        return decision

    def _evaluate(self, context: PullRequestContext) -> MergeDecision:
        try:
            reviews = self.adapter.list_reviews(context)
        except PlatformAPIError as e:
            return MergeDecision(allowed=False, reason=f"Failed to get reviews: {e}")

        approvals = count_approvals(reviews)
        if approvals < self.min_reviewers:
            return MergeDecision(
                allowed=False,
                reason=f"Need {self.min_reviewers} approvals, have {approvals}",
            )

        try:
            head_sha = self.adapter.get_head_sha(context)
        except PlatformAPIError as e:
            return MergeDecision(allowed=False, reason=f"Failed to get PR: {e}")

        if not head_sha:
            return MergeDecision(allowed=False, reason="No SHA available for status checks")

        return MergeDecision(allowed=True, reason="All merge policies satisfied")
