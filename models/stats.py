"""Stats snapshot model for Review Gate."""

from pydantic import BaseModel, Field

from utils.timefmt import format_duration


class StatsSnapshot(BaseModel):
    """
    Point-in-time copy of the stats aggregator.

    Durations are seconds. The snapshot owns its data and can be
    serialized without holding the aggregator lock.
    """

    total_prs_processed: int = Field(default=0, ge=0)
    total_checks_run: int = Field(default=0, ge=0)
    avg_pr_processing_time: float = Field(default=0.0, ge=0.0)
    check_run_times: dict[str, float] = Field(default_factory=dict)
    uptime: float = Field(default=0.0, ge=0.0)

    def to_display(self) -> dict:
        """Render durations as strings for the /stats endpoint."""
        return {
            "total_prs_processed": self.total_prs_processed,
            "total_checks_run": self.total_checks_run,
            "avg_pr_processing_time": format_duration(self.avg_pr_processing_time),
            "check_run_times": {
                name: format_duration(seconds) for name, seconds in self.check_run_times.items()
            },
            "uptime": format_duration(self.uptime),
        }
