import os
from dotenv import load_dotenv
from loguru import logger


DEFAULT_REQUIRED_CHECKS = "test,lint,build"


class Webhook:
    """Configuration for the optional third-party notification endpoint."""

    def __init__(self) -> None:
        self.url: str | None = None
        self.workers: int = 2
        self.queue_size: int = 100
        self.timeout: float = 10.0
        self.slack_channel: str | None = None
        self.jira_project_key: str | None = None

    @property
    def is_init(self) -> bool:
        """Returns True if a delivery url is configured."""
        return bool(self.url)


class Config:
    """
    Centralized configuration loader using python-dotenv.

    Loads all environment variables from .env file and provides
    typed access throughout the application. Values are read once
    at startup and treated as read-only afterwards.
    """

    # GitHub Configuration
    GITHUB_TOKEN: str
    WEBHOOK_SECRET: str | None
    VERIFY_WEBHOOK_SIGNATURE: bool

    # Server Settings
    PORT: int
    DASHBOARD_DIR: str
    LOG_FILE: str
    LOG_LEVEL: str

    # Gating Policy
    MIN_REVIEWERS: int
    REQUIRED_CHECKS: list[str]
    STATUS_CONTEXT: str

    # Stats
    STATS_MAX_ENTRIES: int

    # Optional Webhook
    webhook: Webhook | None

    def __init__(self, config_file: str | None = None) -> None:
        """
        Load configuration from .env file.

        Args:
            config_file: Optional path to custom .env file

        Raises:
            ValueError: If GITHUB_TOKEN is missing or a numeric
                        setting cannot be parsed.
        """
        load_dotenv(config_file)

        # GitHub Configuration (Required)
        self.GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
        self.WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET") or None
        self.VERIFY_WEBHOOK_SIGNATURE = _get_bool("VERIFY_WEBHOOK_SIGNATURE", True)

        # Server Settings
        self.PORT = _get_int("PORT", 8080)
        self.DASHBOARD_DIR = os.getenv("DASHBOARD_DIR", "static")
        self.LOG_FILE = os.getenv("LOG_FILE", "./logs/app.log")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Gating Policy
        self.MIN_REVIEWERS = _get_int("MIN_REVIEWERS", 2)
        self.REQUIRED_CHECKS = parse_check_list(
            os.getenv("REQUIRED_CHECKS") or DEFAULT_REQUIRED_CHECKS
        )
        self.STATUS_CONTEXT = os.getenv("STATUS_CONTEXT", "ci/review-bot")

        self.STATS_MAX_ENTRIES = _get_int("STATS_MAX_ENTRIES", 10000)

        # Optional Webhook
        webhook_url = os.getenv("THIRD_PARTY_WEBHOOK_URL")
        if webhook_url:
            self.webhook = Webhook()
            self.webhook.url = webhook_url
            self.webhook.workers = _get_int("NOTIFY_WORKERS", 2)
            self.webhook.queue_size = _get_int("NOTIFY_QUEUE_SIZE", 100)
            self.webhook.timeout = _get_float("NOTIFY_TIMEOUT", 10.0)
            self.webhook.slack_channel = os.getenv("SLACK_CHANNEL", "#code-reviews")
            self.webhook.jira_project_key = os.getenv("JIRA_PROJECT_KEY", "PROJ")
        else:
            self.webhook = None

        self._validate()

    def _validate(self) -> None:
        """Validate required configuration is present."""
        if not self.GITHUB_TOKEN:
            raise ValueError("GITHUB_TOKEN environment variable is required")

        if self.MIN_REVIEWERS < 0:
            raise ValueError("MIN_REVIEWERS must not be negative")

        if self.STATS_MAX_ENTRIES < 1:
            raise ValueError("STATS_MAX_ENTRIES must be at least 1")

        if self.webhook and (self.webhook.workers < 1 or self.webhook.queue_size < 1):
            raise ValueError("NOTIFY_WORKERS and NOTIFY_QUEUE_SIZE must be at least 1")

        if not self.REQUIRED_CHECKS:
            logger.warning("REQUIRED_CHECKS is empty, pull requests will be gated on reviews only")

        if not self.WEBHOOK_SECRET:
            logger.warning("WEBHOOK_SECRET is not set, webhook signatures will not be verified")


def parse_check_list(raw: str) -> list[str]:
    """Split a comma-separated check list, keeping order and dropping blanks."""
    return [name.strip() for name in raw.split(",") if name.strip()]


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got '{value}'")


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number, got '{value}'")


def _get_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")
