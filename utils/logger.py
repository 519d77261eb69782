import inspect
import json
import logging
import sys
from typing import Any

from loguru import logger

# Transport libraries that log every request at DEBUG
QUIET_LIBRARIES = ("urllib3", "github", "httpx", "httpcore")

CONSOLE_FORMAT = (
    "<white>{time:YYYY-MM-DD HH:mm:ss}</white>"
    " | <level>{level: <8}</level>"
    " | <magenta>{extra[trace_id]}</magenta>"
    " | <cyan>{name}:{line}</cyan>"
    " - <white><b>{message}</b></white>"
)


class InterceptHandler(logging.Handler):
    """Route stdlib logging (uvicorn, fastapi) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames inside the logging module so loguru reports the real caller
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def structured_formatter(record: dict[str, Any]) -> str:
    """
    Render a record as one JSON line for the file sink.

    Webhook context is picked up from the record's extra dict: ``trace_id``
    (set with ``logger.contextualize`` around a delivery), ``pr``,
    ``latency_ms`` and ``status`` (set with ``logger.bind``).
    """
    log_data = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "line": record["line"],
    }

    extra = record.get("extra", {})
    if extra.get("trace_id", "-") != "-":
        log_data["trace_id"] = str(extra["trace_id"])
    if "pr" in extra:
        log_data["pr"] = str(extra["pr"])
    if "latency_ms" in extra:
        log_data["latency_ms"] = int(extra["latency_ms"])
    if "status" in extra:
        log_data["status"] = str(extra["status"])
    if record.get("exception"):
        log_data["exception"] = repr(record["exception"].value)

    # loguru treats the returned string as a template
    return json.dumps(log_data).replace("{", "{{").replace("}", "}}") + "\n"


def setup_logging(log_file: str | None = None, level: str = "INFO") -> None:
    """
    Configure loguru as the only logging backend.

    Args:
        log_file: Path of the rotating JSON log, or None for console only
        level: Minimum level for both sinks
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict):
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True

    logger.remove()
    logger.configure(extra={"trace_id": "-"})
    for library in QUIET_LIBRARIES:
        logger.disable(library)

    logger.add(sink=sys.stdout, format=CONSOLE_FORMAT, level=level)

    if log_file:
        logger.add(
            sink=log_file,
            format=structured_formatter,
            level=level,
            rotation="10 MB",
            retention="10 days",
            compression="zip",
        )
