"""
Check and merge policy models for Review Gate.

Defines the per-check result, the merge policy decision and the
commit status verdict derived from both.
"""

from pydantic import BaseModel, ConfigDict, Field

from utils.timefmt import format_duration

from .platform import CheckStatus, StatusState


class CheckResult(BaseModel):
    """
    Result of running one named check against a pull request.

    Created by a check runner and stamped with its wall-clock elapsed
    time by the orchestrator. Never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Check name as configured")
    status: CheckStatus = Field(..., description="Check outcome")
    message: str = Field(default="", description="Human-readable summary")
    elapsed: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds spent")

    @property
    def time(self) -> str:
        return format_duration(self.elapsed)


class MergeDecision(BaseModel):
    """Outcome of a merge policy evaluation."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str


class Verdict(BaseModel):
    """Overall commit status derived from the checks and the merge decision."""

    model_config = ConfigDict(frozen=True)

    state: StatusState
    description: str
