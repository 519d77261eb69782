"""
Platform models for Review Gate.

Defines the normalized pull request identity and the records fetched
from the hosting platform (changed files, reviews).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CheckStatus(str, Enum):
    """Outcome of a single check."""

    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"
    ERROR = "error"
    SKIPPED = "skipped"


class StatusState(str, Enum):
    """Commit status states published back to the platform."""

    PENDING = "pending"  # Merge policy not satisfied yet
    SUCCESS = "success"  # Policy satisfied, no failed checks
    FAILURE = "failure"  # Policy satisfied, at least one failed check


class PullRequestContext(BaseModel):
    """
    Identity of the pull request an event refers to.

    An empty head_sha is a valid state: the merge policy treats it as
    "no commit to check" rather than as an error.
    """

    model_config = ConfigDict(frozen=True)  # Immutable after creation

    owner: str = Field(..., description="Repository owner login")
    repo: str = Field(..., description="Repository name")
    pr_number: int = Field(..., ge=1, description="Pull request number")
    head_sha: str = Field(default="", description="Head commit SHA, may be empty")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def key(self) -> str:
        """Stats key in the form owner/repo#number."""
        return f"{self.owner}/{self.repo}#{self.pr_number}"


class ChangedFile(BaseModel):
    """A file touched by the pull request."""

    model_config = ConfigDict(frozen=True)

    filename: str
    additions: int = Field(default=0, ge=0)


class Review(BaseModel):
    """A submitted pull request review."""

    model_config = ConfigDict(frozen=True)

    state: str = Field(..., description="Review state as reported by the platform, e.g. APPROVED")
    reviewer: str | None = Field(None, description="Reviewer login")
