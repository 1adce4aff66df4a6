"""Logging configuration for the Neko Companion application."""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

ENVIRONMENT_VARIABLE = "NEKO_COMPANION_ENV"

APP_LOG_MAX_BYTES = 5 * 1024 * 1024
ERROR_LOG_MAX_BYTES = 2 * 1024 * 1024


class LoggingService:
    """Configure structlog on top of the standard library logging tree.

    Console output is rendered for humans in development and as JSON in
    production. Log files are always JSON. While the TUI owns the terminal
    nothing is written to the console.
    """

    def __init__(
        self,
        log_level: str = "INFO",
        log_dir: Path | None = None,
        tui_mode: bool = False,
    ) -> None:
        """Initialize the logging service.

        Args:
            log_level: The minimum log level to capture
            log_dir: Directory for rotating log files (None for no files)
            tui_mode: If True, suppress console output
        """
        self.log_level = log_level.upper()
        self.log_dir = log_dir
        self.tui_mode = tui_mode
        self.is_development = os.getenv(ENVIRONMENT_VARIABLE, "development") == "development"

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)

    def configure(self) -> None:
        """Configure structlog and attach handlers to the root logger."""
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(self.numeric_level)

        if not self.tui_mode:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.numeric_level)
            console_handler.setFormatter(self._formatter(self._console_renderer()))
            root_logger.addHandler(console_handler)

        if self.log_dir:
            self._setup_file_logging(root_logger)

        if not root_logger.handlers:
            # Keeps logging's last-resort handler from writing over the TUI
            root_logger.addHandler(logging.NullHandler())

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *self._shared_processors(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _setup_file_logging(self, root_logger: logging.Logger) -> None:
        """Add rotating ``app.log`` and ``error.log`` handlers."""
        assert self.log_dir is not None
        self.log_dir.mkdir(parents=True, exist_ok=True)
        json_formatter = self._formatter(structlog.processors.JSONRenderer(ensure_ascii=False))

        app_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / "app.log",
            maxBytes=APP_LOG_MAX_BYTES,
            backupCount=3,
            encoding="utf-8",
        )
        app_handler.setLevel(self.numeric_level)
        app_handler.setFormatter(json_formatter)
        root_logger.addHandler(app_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / "error.log",
            maxBytes=ERROR_LOG_MAX_BYTES,
            backupCount=2,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(json_formatter)
        root_logger.addHandler(error_handler)

    def _shared_processors(self) -> list[Any]:
        """Processors applied to every event, from structlog or stdlib loggers."""
        return [
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

    def _console_renderer(self) -> Any:
        if self.is_development:
            return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        return structlog.processors.JSONRenderer(ensure_ascii=False)

    def _formatter(self, renderer: Any) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=self._shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )

    def get_logger(self, name: str | None = None) -> structlog.stdlib.BoundLogger:
        """Get a configured logger instance."""
        return structlog.stdlib.get_logger(name)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    environment: str | None = None,
    tui_mode: bool = False,
) -> LoggingService:
    """Set up application logging.

    Args:
        log_level: Minimum log level to capture
        log_dir: Directory for log files (None for console only)
        environment: Environment name (development/production)
        tui_mode: If True, suppress console logging

    Returns:
        Configured LoggingService instance
    """
    if environment:
        os.environ[ENVIRONMENT_VARIABLE] = environment

    service = LoggingService(log_level=log_level, log_dir=log_dir, tui_mode=tui_mode)
    service.configure()
    return service
