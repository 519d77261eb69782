"""
Review Gate - FastAPI Application

This module provides the HTTP layer for the Review Gate bot, including:
- GitHub webhook endpoint driving the gating pipeline
- Stats snapshot endpoint for the dashboard
- Health check and Prometheus metrics endpoints
- Static dashboard serving

Services are built once in the application lifespan and shared by every
request worker through app.state.
"""

import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from adapters.base import GitPlatformAdapter
from adapters.github import GitHubAdapter
from services.dispatcher import DispatchOutcome, EventDispatcher, WebhookParseError, parse_event
from services.merge_policy import MergePolicyEvaluator
from services.notifications import NotificationFanout
from services.orchestrator import CheckOrchestrator
from services.publisher import StatusPublisher
from services.stats import StatsAggregator
from utils.config import Config
from utils.logger import setup_logging
from utils.metrics import (
    webhook_parse_errors_total,
    webhook_received_total,
    webhook_signature_verified_total,
)

VERSION = "1.0.0"


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    config: Optional[Config] = None,
    adapter: Optional[GitPlatformAdapter] = None,
    fanout: Optional[NotificationFanout] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Preloaded configuration (loaded from environment at startup if None)
        adapter: Platform adapter (GitHubAdapter built from config if None)
        fanout: Notification fanout (built from config.webhook if None)

    Returns:
        FastAPI application with lifespan-managed services
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Startup aborts if configuration is invalid (e.g. GITHUB_TOKEN missing).
        Shutdown stops the notification workers and releases stats.
        """
        app_config = config or Config()
        setup_logging(app_config.LOG_FILE or None, app_config.LOG_LEVEL)

        platform = adapter or GitHubAdapter(
            token=app_config.GITHUB_TOKEN,
            signature_verification=app_config.VERIFY_WEBHOOK_SIGNATURE,
        )
        stats = StatsAggregator(max_entries=app_config.STATS_MAX_ENTRIES)

        hooks = app_config.webhook
        notifier = fanout or NotificationFanout(
            url=hooks.url if hooks else None,
            workers=hooks.workers if hooks else 1,
            queue_size=hooks.queue_size if hooks else 1,
            timeout=hooks.timeout if hooks else 10.0,
        )
        notifier.start()

        app.state.config = app_config
        app.state.adapter = platform
        app.state.stats = stats
        app.state.fanout = notifier
        app.state.dispatcher = EventDispatcher(
            orchestrator=CheckOrchestrator(platform, stats, app_config.REQUIRED_CHECKS),
            merge_policy=MergePolicyEvaluator(platform, app_config.MIN_REVIEWERS),
            publisher=StatusPublisher(platform, app_config.STATUS_CONTEXT),
            stats=stats,
            fanout=notifier,
            slack_channel=hooks.slack_channel if hooks else None,
            jira_project_key=hooks.jira_project_key if hooks else None,
        )

        _mount_dashboard(app, app_config.DASHBOARD_DIR)

        logger.info(f"Starting Review Bot server on port {app_config.PORT}")
        logger.info(f"Required checks: {', '.join(app_config.REQUIRED_CHECKS) or '(none)'}")

        yield

        logger.info("Shutting down Review Bot server")
        notifier.shutdown()
        stats.close()

    app = FastAPI(
        title="Review Gate",
        description="Automated pull request gating for GitHub",
        version=VERSION,
        lifespan=lifespan,
    )
    _register_routes(app)
    return app


def _mount_dashboard(app: FastAPI, directory: str) -> None:
    if not directory or not os.path.isdir(directory):
        logger.debug(f"Dashboard directory '{directory}' not found, static files disabled")
        return
    if any(getattr(route, "name", None) == "dashboard" for route in app.router.routes):
        return
    app.mount("/", StaticFiles(directory=directory, html=True), name="dashboard")


# =============================================================================
# Dependencies
# =============================================================================

async def get_config(request: Request) -> Config:
    """Dependency injection for Config."""
    return request.app.state.config


async def get_dispatcher(request: Request) -> EventDispatcher:
    """Dependency injection for the event dispatcher."""
    return request.app.state.dispatcher


async def get_stats(request: Request) -> StatsAggregator:
    """Dependency injection for the stats aggregator."""
    return request.app.state.stats


async def verify_webhook_signature(
    request: Request,
    x_hub_signature_256: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    config: Config = Depends(get_config),
) -> bool:
    """
    Verify webhook signature for security.

    Args:
        request: FastAPI request object
        x_hub_signature_256: GitHub HMAC-SHA256 signature header
        config: Application configuration

    Returns:
        bool: True if signature valid or verification not configured

    Raises:
        HTTPException: If signature verification fails
    """
    secret = config.WEBHOOK_SECRET

    # Skip verification if secret not configured (development mode)
    if not secret or not config.VERIFY_WEBHOOK_SIGNATURE:
        return True

    payload = await request.body()
    adapter: GitPlatformAdapter = request.app.state.adapter

    is_valid = adapter.verify_signature(payload, x_hub_signature_256 or "", secret)
    webhook_signature_verified_total.labels(result="success" if is_valid else "failure").inc()

    if not is_valid:
        raise HTTPException(
            status_code=401,
            detail="Invalid webhook signature",
        )

    return True


# =============================================================================
# Endpoints
# =============================================================================

def _register_routes(app: FastAPI) -> None:

    @app.post("/webhook")
    async def receive_webhook(
        request: Request,
        x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
        x_github_delivery: Optional[str] = Header(None, alias="X-GitHub-Delivery"),
        signature_verified: bool = Depends(verify_webhook_signature),
        dispatcher: EventDispatcher = Depends(get_dispatcher),
    ):
        """
        Receive a GitHub webhook and run the matching flow.

        The delivery is acknowledged with 200 as soon as it parses;
        downstream failures are logged and never change the response.

        Raises:
            HTTPException: 400 if the event type or payload cannot be parsed
        """
        received_at = time.perf_counter()
        event_type = x_github_event or ""
        trace_id = x_github_delivery or str(uuid.uuid4())

        payload = await request.body()

        try:
            event = parse_event(event_type, payload)
        except WebhookParseError as e:
            webhook_parse_errors_total.labels(event_type=event_type or "unknown").inc()
            logger.warning(f"Failed to parse webhook ({event_type or 'no event type'}): {e}")
            raise HTTPException(
                status_code=400,
                detail=f"Error parsing webhook: {e}",
            )

        webhook_received_total.labels(event_type=event_type).inc()

        with logger.contextualize(trace_id=trace_id):
            try:
                outcome = await run_in_threadpool(dispatcher.dispatch, event, received_at)
            except Exception as e:
                logger.exception(f"Unhandled error while processing {event_type} delivery: {e}")
                outcome = DispatchOutcome.FAILED

        return {
            "status": "ok",
            "event": event.kind,
            "outcome": outcome.value,
            "trace_id": trace_id,
        }

    @app.get("/stats")
    async def get_stats_snapshot(stats: StatsAggregator = Depends(get_stats)):
        """Stats snapshot for the dashboard."""
        return stats.snapshot().to_display()

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app = create_app()


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config().PORT,
        access_log=True,
        workers=1,
    )
