"""
Webhook event models for Review Gate.

The inbound event is one of a closed set of variants. Anything the
dispatcher does not act on is carried as Unrecognized so that it can be
acknowledged without failing the delivery.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .platform import PullRequestContext


class PullRequestUpdated(BaseModel):
    """pull_request webhook (opened, synchronize, closed, ...)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request"] = "pull_request"
    action: str = ""
    owner: str
    repo: str
    pr_number: int = Field(..., ge=1)
    head_sha: str = ""

    @property
    def head_ref_present(self) -> bool:
        return bool(self.head_sha)

    def context(self) -> PullRequestContext:
        return PullRequestContext(
            owner=self.owner,
            repo=self.repo,
            pr_number=self.pr_number,
            head_sha=self.head_sha,
        )


class ReviewSubmitted(BaseModel):
    """pull_request_review webhook (submitted, edited, dismissed)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request_review"] = "pull_request_review"
    action: str = ""
    owner: str
    repo: str
    pr_number: int = Field(..., ge=1)
    review_state: str = ""
    reviewer: str = ""

    def context(self) -> PullRequestContext:
        return PullRequestContext(owner=self.owner, repo=self.repo, pr_number=self.pr_number)


class CheckRunObserved(BaseModel):
    """check_run webhook reported by another CI integration."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["check_run"] = "check_run"
    name: str = ""
    status: str = ""


class Unrecognized(BaseModel):
    """A known platform event this service does not act on."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unrecognized"] = "unrecognized"
    event_type: str


Event = Union[PullRequestUpdated, ReviewSubmitted, CheckRunObserved, Unrecognized]
