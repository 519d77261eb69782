"""
Notification models for Review Gate.

Defines the processing summary POSTed to the third-party webhook
after a pull request has been gated.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .checks import CheckResult


class SlackNotification(BaseModel):
    """Slack relay hints for the receiving integration."""

    channel: str = Field(..., description="Target channel, e.g. #code-reviews")
    message: str = Field(..., description="One-line processing summary")


class JiraIntegration(BaseModel):
    """Jira relay hints for the receiving integration."""

    update_ticket: bool = Field(default=True, description="Whether the ticket should be updated")
    ticket_id: str = Field(..., description="Ticket derived from the PR number, e.g. PROJ-42")


class ThirdPartyHooks(BaseModel):
    """Optional per-integration sections of the notification payload."""

    slack_notification: Optional[SlackNotification] = None
    jira_integration: Optional[JiraIntegration] = None


class CheckRunEntry(BaseModel):
    """Serialized form of a CheckResult inside a notification."""

    name: str
    status: str
    message: str
    time: str

    @classmethod
    def from_result(cls, result: CheckResult) -> "CheckRunEntry":
        return cls(
            name=result.name,
            status=result.status.value,
            message=result.message,
            time=result.time,
        )


class ProcessingSummary(BaseModel):
    """
    Summary of one pipeline run, built once and handed to the fanout.

    Carries exactly one check entry per requested check name, in the
    order the checks were configured.
    """

    pr_number: int = Field(..., ge=1, description="Pull request number")
    processing_time: str = Field(..., description="Total pipeline time, e.g. 1.2s")
    checks_run: list[CheckRunEntry] = Field(default_factory=list, description="Per-check results")
    reviewers_count: int = Field(..., ge=0, description="Approval threshold applied")
    status: Literal["processed"] = "processed"
    third_party_hooks: ThirdPartyHooks = Field(default_factory=ThirdPartyHooks)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
