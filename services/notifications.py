"""
Third-party notification fanout.

Processing summaries are queued and delivered by a small pool of worker
threads, detached from the webhook request that produced them. The queue
is bounded; when it is full the summary is dropped with a warning.
Delivery is a single POST with a timeout and no retry.
"""

import queue
import threading

import requests
from loguru import logger

from models.checks import CheckResult
from models.notification import (
    CheckRunEntry,
    JiraIntegration,
    ProcessingSummary,
    SlackNotification,
    ThirdPartyHooks,
)
from models.platform import PullRequestContext
from utils.metrics import notifications_total
from utils.timefmt import format_duration

_STOP = object()


def build_summary(
    context: PullRequestContext,
    checks: list[CheckResult],
    processing_seconds: float,
    reviewers_count: int,
    slack_channel: str | None = None,
    jira_project_key: str | None = None,
) -> ProcessingSummary:
    """Build the notification payload for one pipeline run."""
    processing_time = format_duration(processing_seconds)

    hooks = ThirdPartyHooks()
    if slack_channel:
        hooks.slack_notification = SlackNotification(
            channel=slack_channel,
            message=f"PR #{context.pr_number} in {context.full_name} processed in {processing_time}",
        )
    if jira_project_key:
        hooks.jira_integration = JiraIntegration(
            update_ticket=True,
            ticket_id=f"{jira_project_key}-{context.pr_number}",
        )

    return ProcessingSummary(
        pr_number=context.pr_number,
        processing_time=processing_time,
        checks_run=[CheckRunEntry.from_result(check) for check in checks],
        reviewers_count=reviewers_count,
        third_party_hooks=hooks,
    )


class NotificationFanout:
    """
    Bounded queue plus worker pool delivering summaries to one endpoint.

    Lifecycle: start() spawns the workers, shutdown() signals them to stop
    and discards anything not yet delivered. Without a url every call is
    a no-op.
    """

    def __init__(
        self,
        url: str | None,
        workers: int = 2,
        queue_size: int = 100,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.url = url
        self.workers = workers
        self.timeout = timeout
        self.session = session or requests.Session()
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def start(self) -> None:
        if not self.enabled or self._threads:
            return

        self._stop.clear()
        for index in range(self.workers):
            thread = threading.Thread(
                target=self._worker,
                name=f"notification-fanout-{index}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        logger.info(f"Notification fanout started with {self.workers} workers")

    def submit(self, summary: ProcessingSummary) -> bool:
        """
        Queue a summary for delivery without blocking.

        Returns:
            True if queued, False if fanout is disabled, stopped or full
        """
        if not self.enabled:
            return False

        if self._stop.is_set():
            notifications_total.labels(result="cancelled").inc()
            logger.warning(f"Notification for PR #{summary.pr_number} rejected, fanout is shutting down")
            return False

        try:
            self._queue.put_nowait(summary)
        except queue.Full:
            notifications_total.labels(result="dropped").inc()
            logger.warning(f"Notification queue full, dropping summary for PR #{summary.pr_number}")
            return False

        return True

    def deliver(self, summary: ProcessingSummary) -> bool:
        """POST one summary. Failures are logged, never raised."""
        try:
            response = self.session.post(
                self.url,
                data=summary.to_json(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            notifications_total.labels(result="failed").inc()
            logger.error(f"Failed to send webhook for PR #{summary.pr_number}: {e}")
            return False

        notifications_total.labels(result="sent").inc()
        logger.info(f"Webhook sent successfully for PR #{summary.pr_number}")
        return True

    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if self._stop.is_set():
                    notifications_total.labels(result="cancelled").inc()
                    continue
                self.deliver(item)
            finally:
                self._queue.task_done()

    def join(self) -> None:
        """Block until every queued summary has been handled."""
        self._queue.join()

    def shutdown(self, timeout: float = 5.0) -> None:
        """Stop the workers; undelivered summaries are cancelled."""
        if not self._threads:
            return

        self._stop.set()

        # Drain pending items so the stop markers fit in the queue
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            notifications_total.labels(result="cancelled").inc()
            self._queue.task_done()

        for _ in self._threads:
            self._queue.put(_STOP)

        # A worker may be inside a POST bounded by the delivery timeout
        join_timeout = max(timeout, self.timeout)
        for thread in self._threads:
            thread.join(timeout=join_timeout)

        if self.running:
            logger.warning("Notification workers still delivering, leaving session open")
            return

        self._threads = []
        self.session.close()
        logger.info("Notification fanout stopped")
