"""Centralized logging configuration for the deck analytics engine."""

import json
import logging
import logging.handlers
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Project root for log directory
PROJECT_ROOT = Path(__file__).parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"

ENGINE_LOGGER = "deck_analytics.services"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges bound context into every record's extra_data."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})
        extra["extra_data"] = {**self.extra, **extra.get("extra_data", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def _rotating_json_handler(
    path: Path,
    level: int,
    max_bytes: int,
    backup_count: int,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    log_level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = False,
    log_dir: Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        enable_console: Whether to log to console.
        enable_file: Whether to write rotating JSON log files.
        log_dir: Directory for log files (defaults to <project>/logs).
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of backup files to keep.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    engine_logger = logging.getLogger(ENGINE_LOGGER)
    engine_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(console_handler)

    if enable_file:
        target_dir = log_dir or LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)

        root_logger.addHandler(
            _rotating_json_handler(
                target_dir / "deck_analytics.log", logging.DEBUG, max_bytes, backup_count
            )
        )
        # Error-only log for quick debugging
        root_logger.addHandler(
            _rotating_json_handler(
                target_dir / "errors.log", logging.ERROR, max_bytes, backup_count
            )
        )
        # Engine computations (analysis, simulation, meta refresh)
        engine_logger.addHandler(
            _rotating_json_handler(
                target_dir / "engine.log", logging.DEBUG, max_bytes, backup_count
            )
        )


def get_logger(name: str, **context: Any) -> ContextLogger:
    """Get a logger with optional context.

    Args:
        name: Logger name (typically __name__).
        **context: Additional context to include in all log messages.

    Returns:
        ContextLogger with the specified context.
    """
    return ContextLogger(logging.getLogger(name), context)
