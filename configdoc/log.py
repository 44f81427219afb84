"""Loguru sinks of the command line.

Library modules log through ``loguru.logger`` directly and never add sinks;
only the command line calls :func:`configure_logging`.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .settings import LoggingSettings

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{process.id: <6} | "
    "{name}:{function}:{line} | "
    "{message}"
)


class LogConfigurator:
    """Installs the console and file sinks once per process."""

    def __init__(self) -> None:
        self.is_configured = False
        self.log_file_path: Optional[Path] = None

    def configure(self, settings: LoggingSettings) -> None:
        if self.is_configured:
            logger.debug("Logging already configured, skipping")
            return

        logger.remove()
        # stdout carries the command output.
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=settings.level.upper(),
            colorize=False,
            serialize=settings.serialize,
            backtrace=False,
            diagnose=False,
        )
        if settings.file_path is not None:
            self._configure_file_handler(settings)
        self.is_configured = True
        logger.debug("Logging configured: {}", settings.model_dump(mode="json"))

    def _configure_file_handler(self, settings: LoggingSettings) -> None:
        self.log_file_path = Path(settings.file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_file_path),
            format=FILE_FORMAT,
            level=settings.level.upper(),
            rotation=settings.rotation,
            retention=settings.retention,
            serialize=settings.serialize,
            enqueue=True,
        )

    def reset(self) -> None:
        logger.remove()
        self.is_configured = False
        self.log_file_path = None


_configurator = LogConfigurator()


def configure_logging(settings: LoggingSettings) -> None:
    _configurator.configure(settings)


def reset_logging() -> None:
    """Drop every sink; used by tests that configure logging repeatedly."""

    _configurator.reset()


__all__ = ["LogConfigurator", "configure_logging", "reset_logging"]
