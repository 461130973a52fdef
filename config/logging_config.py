"""Structured logging configuration with file rotation."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers whose records also go to the service-call log
_SERVICE_LOGGERS = ("tools.narrative_api", "tools.agent_sdk_client")


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        str(path),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str | Path] = None,
    console_enabled: bool = True,
) -> None:
    """Configure application-wide logging with console and file handlers.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        log_dir: Directory for log files. Defaults to ./data/logs.
        console_enabled: Whether to output to console.
    """
    log_dir = Path(log_dir or "./data/logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates on re-init
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(log_dir / "storyjournal.log", level, formatter))

    # Remote service + LLM calls get their own file for easier debugging
    service_handler = _rotating_handler(log_dir / "service_calls.log", logging.DEBUG, formatter)
    for name in _SERVICE_LOGGERS:
        service_logger = logging.getLogger(name)
        for existing in list(service_logger.handlers):
            if isinstance(existing, RotatingFileHandler):
                service_logger.removeHandler(existing)
        service_logger.addHandler(service_handler)

    logging.getLogger(__name__).debug("Logging initialized: level=%s, dir=%s", level, log_dir)
