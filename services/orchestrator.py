"""
Check orchestration.

Runs the configured checks one after another against a pull request,
timing each one and feeding the stats aggregator.
"""

import time

from loguru import logger

from adapters.base import GitPlatformAdapter
from models.checks import CheckResult
from models.platform import CheckStatus, PullRequestContext
from services.checks import UnknownCheck, build_check_registry
from services.stats import StatsAggregator
from utils.metrics import check_duration_seconds


class CheckOrchestrator:
    """
    Manages the sequential execution of configured checks.

    A failing check never stops the ones after it, so every configured
    name gets exactly one result, in configuration order.
    """

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        stats: StatsAggregator,
        required_checks: list[str],
    ):
        """
        Initialize the orchestrator.

        Args:
            adapter: Platform adapter the check runners fetch files through
            stats: Aggregator receiving per-check timings
            required_checks: Ordered check names to run for every PR
        """
        self.stats = stats
        self.required_checks = list(required_checks)
        self.runners = build_check_registry(adapter)

    def resolve(self, name: str):
        return self.runners.get(name) or UnknownCheck(name)

    def run_all(self, context: PullRequestContext) -> list[CheckResult]:
        logger.info(f"Running {len(self.required_checks)} checks sequentially for {context.key}")

        results = []
        for name in self.required_checks:
            runner = self.resolve(name)

            start = time.perf_counter()
            try:
                result = runner.evaluate(context)
            except Exception as e:
                logger.exception(f"Check {name} failed with exception: {e}")
                result = CheckResult(
                    name=name,
                    status=CheckStatus.ERROR,
                    message=f"Check failed with error: {e}",
                )
            elapsed = time.perf_counter() - start

            result = result.model_copy(update={"elapsed": elapsed})
            results.append(result)

            self.stats.record_check_run(name, elapsed)
            check_duration_seconds.labels(check=name, status=result.status.value).observe(elapsed)
            logger.info(f"Check {name} completed: {result.status.value} - {result.message}")

        return results
