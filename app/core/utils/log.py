import logging
import logging.config
import queue
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Any

import uvicorn

from app.core.utils.config import Settings

# ANSI escape sequences, see https://talyian.github.io/ansicolors/
LEVEL_COLORS = {
    logging.DEBUG: "\033[38;5;12m",
    logging.INFO: "\033[38;5;10m",
    logging.WARNING: "\033[38;5;11m",
    logging.ERROR: "\033[38;5;9m",
    logging.CRITICAL: "\033[38;5;1m",
}
BOLD = "\033[1m"
RESET = "\033[0m"

DATE_FORMAT = "%d-%b-%y %H:%M:%S"


class ColoredConsoleFormatter(uvicorn.logging.DefaultFormatter):
    """
    Console formatter printing the level in bold and the message in the color of its level
    """

    def __init__(self, *args, **kwargs):
        super().__init__(datefmt=DATE_FORMAT)

        self.level_formatters = {
            level: logging.Formatter(
                f"%(asctime)s - %(name)s - {BOLD}%(levelname)s{RESET} - {color}%(message)s{RESET}",
                DATE_FORMAT,
            )
            for level, color in LEVEL_COLORS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        # Custom levels are printed like errors
        formatter = self.level_formatters.get(
            record.levelno,
            self.level_formatters[logging.ERROR],
        )
        return formatter.format(record)


class LogConfig:
    """
    Logging configuration of the API, as a [dictConfig](https://docs.python.org/3/library/logging.config.html#logging-config-dictschema) schema.

    Two loggers should be used by the application:
     - `recommendations.access`: one record per request, written by the middleware of `app.app`
     - `recommendations.error`: startup information and errors

    Call `LogConfig().initialize_loggers(settings)` once per process.
    """

    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FOLDER: Path = Path("logs")

    def file_handler(self, filename: str, max_megabytes: int, backup_count: int):
        return {
            "formatter": "default",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(self.LOG_FOLDER / filename),
            "maxBytes": 1024 * 1024 * max_megabytes,
            "backupCount": backup_count,
            "level": "INFO",
        }

    def get_config_dict(self, settings: Settings) -> dict[str, Any]:
        # Settings are passed as a parameter, the `get_settings` dependency is only available in endpoints
        minimum_level = "DEBUG" if settings.LOG_DEBUG_MESSAGES else "INFO"

        return {
            "version": 1,
            # In debug mode, third party loggers (SQLAlchemy, uvicorn...) are kept
            "disable_existing_loggers": not settings.LOG_DEBUG_MESSAGES,
            "formatters": {
                "default": {
                    "format": self.LOG_FORMAT,
                    "datefmt": DATE_FORMAT,
                },
                "console_formatter": {
                    "()": "app.core.utils.log.ColoredConsoleFormatter",
                },
            },
            "handlers": {
                "console": {
                    "formatter": "console_formatter",
                    "class": "logging.StreamHandler",
                    "level": minimum_level,
                },
                "file_errors": self.file_handler(
                    "errors.log",
                    max_megabytes=10,
                    backup_count=20,
                ),
                "file_access": self.file_handler(
                    "access.log",
                    max_megabytes=40,
                    backup_count=50,
                ),
            },
            "loggers": {
                "root": {
                    "level": "DEBUG",
                    "handlers": ["console"],
                },
                # Children of `recommendations` have their own handlers
                "recommendations": {
                    "propagate": False,
                },
                "recommendations.access": {
                    "handlers": ["file_access", "console"],
                    "level": minimum_level,
                },
                "recommendations.error": {
                    "handlers": ["file_errors", "console"],
                    "level": minimum_level,
                },
                # Replaced by `recommendations.access`, which includes the request id
                "uvicorn.access": {"handlers": []},
                "uvicorn.error": {
                    "handlers": ["file_errors", "console"],
                    "level": minimum_level,
                    "propagate": False,
                },
            },
        }

    def initialize_loggers(self, settings: Settings) -> None:
        """
        Configure the loggers, then move their handlers behind a queue.

        Endpoints log from the event loop: file writes are done by a `QueueListener` thread per logger
        so that a slow disk never blocks a request.
        See https://docs.python.org/3/howto/logging-cookbook.html#dealing-with-handlers-that-block
        """
        # File handlers can't create their folder
        self.LOG_FOLDER.mkdir(parents=True, exist_ok=True)

        config_dict = self.get_config_dict(settings=settings)
        logging.config.dictConfig(config_dict)

        for name in config_dict["loggers"]:
            logger = logging.getLogger(name)
            if not logger.handlers:
                continue

            log_queue: queue.Queue[Any] = queue.Queue(-1)
            listener = QueueListener(
                log_queue,
                *logger.handlers,
                respect_handler_level=True,
            )
            listener.start()

            logger.handlers = [QueueHandler(log_queue)]
