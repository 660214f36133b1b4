"""Logging configuration using structlog for structured JSON logging."""

import logging
import sys
from collections.abc import MutableMapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Events shown on the terminal without --verbose (plus all ERROR/CRITICAL)
USER_FACING_EVENTS: set[str] = {
    "sync_started",
    "sync_completed",
    "sync_failed",
    "sync_summary",
    "push_summary",
    "cleanup_summary",
    "count_mismatch_warning",
    "failed_items_warning",
    "undo_completed",
    "connection_verified",
    "config_warning",
}

LOG_FILE_NAME = "raindrop-obsidian-sync.log"
ERROR_LOG_FILE_NAME = "errors.log"

_configured = False
_handlers: list[logging.Handler] = []


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    return _LOG_LEVELS.get(level_name.upper(), logging.INFO)


class UserFacingConsoleFilter(logging.Filter):
    """Logging filter that only passes user-facing events to console.

    Detailed per-document diagnostics still reach the log files.
    """

    def __init__(self, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True

        if record.levelno >= logging.ERROR:
            return True

        event = record.getMessage()
        if event in USER_FACING_EVENTS:
            return True
        return any(user_event in event for user_event in USER_FACING_EVENTS)


class UserFriendlyConsoleRenderer:
    """Renders user-facing logs in a clean, readable format for terminal output."""

    def __init__(self) -> None:
        self._fallback = ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = event_dict.get("event", "")
        level = str(event_dict.get("level", "info")).upper()

        if event == "sync_started":
            mode = " (test mode)" if event_dict.get("test_mode") else ""
            return f"Starting sync into {event_dict.get('folder', '')}{mode}"

        elif event == "sync_completed":
            return (
                f"Sync completed in {event_dict.get('duration_seconds', 0):.1f}s: "
                f"{event_dict.get('created', 0)} created, "
                f"{event_dict.get('updated', 0)} updated, "
                f"{event_dict.get('deleted', 0)} deleted"
            )

        elif event == "sync_summary":
            summary = (
                f"Summary: {event_dict.get('total', 0)} bookmarks | "
                f"{event_dict.get('created', 0)} created, "
                f"{event_dict.get('updated', 0)} updated, "
                f"{event_dict.get('skipped', 0)} skipped"
            )
            failed = event_dict.get("failed", 0)
            if failed:
                summary += f" | {failed} failed"
            return summary

        elif event == "push_summary":
            return f"Synced {event_dict.get('pushed', 0)} note(s) back to Raindrop"

        elif event == "cleanup_summary":
            return (
                f"Removed {event_dict.get('deleted', 0)} deleted bookmark(s) and "
                f"{event_dict.get('folders_removed', 0)} empty folder(s)"
            )

        elif event == "count_mismatch_warning":
            return (
                f"WARNING: bookmark count mismatch: total={event_dict.get('total', 0)}, "
                f"processed={event_dict.get('processed', 0)}"
            )

        elif event == "failed_items_warning":
            return (
                f"WARNING: {event_dict.get('failed', 0)} bookmark(s) failed to sync; "
                "see the status note and log file for details"
            )

        elif event == "undo_completed":
            return (
                f"Deleted {event_dict.get('deleted', 0)} synced file(s) "
                "and cleaned up empty folders"
            )

        elif event == "connection_verified":
            return f"Connected as {event_dict.get('user', '')}"

        elif event == "sync_failed":
            return f"Sync failed: {event_dict.get('error', 'Unknown error')}"

        elif level == "ERROR":
            return f"ERROR: {event_dict.get('error', event)}"

        elif level == "WARNING" and event in USER_FACING_EVENTS:
            return f"WARNING: {event}"

        return str(self._fallback(logger, method_name, event_dict))


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    verbose: bool = False,
) -> None:
    """Configure structlog logging with console and rotating file output.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (default: ./logs)
        verbose: If True, show all log messages on terminal
    """
    global _configured

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_dir is None:
        log_dir = Path("./logs")
    log_dir.mkdir(exist_ok=True, parents=True)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_get_level_no(log_level))
    console_handler.addFilter(UserFacingConsoleFilter(verbose=verbose))
    renderer: Any
    if verbose:
        renderer = ConsoleRenderer(
            colors=True, exception_formatter=structlog.dev.plain_traceback
        )
    else:
        renderer = UserFriendlyConsoleRenderer()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processor=JSONRenderer(),
        foreign_pre_chain=_shared_processors(),
    )

    # 10MB per file, 5 backups
    file_handler = RotatingFileHandler(
        filename=str(log_dir / LOG_FILE_NAME),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)
    _handlers.append(file_handler)

    error_handler = RotatingFileHandler(
        filename=str(log_dir / ERROR_LOG_FILE_NAME),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_formatter)
    root_logger.addHandler(error_handler)
    _handlers.append(error_handler)

    _configured = True

    get_logger(__name__).debug(
        "logging_configured",
        console_level=log_level,
        log_dir=str(log_dir),
        verbose=verbose,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to the given name.

    Logging is configured with defaults on first use if ``configure_logging``
    has not been called yet.
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
