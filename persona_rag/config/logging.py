"""Logging configuration for Persona RAG."""

import logging
from typing import Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler

from .settings import Settings

LOG_FILE_NAME = "persona_rag.log"

# Chatty at INFO; kept at WARNING unless DEBUG is set
NOISY_LOGGERS = ("chromadb", "httpx", "httpcore", "sentence_transformers", "urllib3")

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _quiet_third_party(debug: bool) -> None:
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def _formatter(*renderers) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Set up structured logging with Rich formatting.

    structlog events go through the stdlib handlers: a Rich console on
    stderr (pretty in DEBUG, JSON otherwise) and a JSON file under LOG_DIR.
    """
    if settings is None:
        settings = Settings()

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=settings.DEBUG,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(
        _formatter(structlog.dev.ConsoleRenderer(colors=False))
        if settings.DEBUG
        else _formatter(structlog.processors.format_exc_info, structlog.processors.JSONRenderer())
    )

    file_handler = logging.FileHandler(settings.LOG_DIR / LOG_FILE_NAME, encoding="utf-8")
    file_handler.setFormatter(
        _formatter(structlog.processors.format_exc_info, structlog.processors.JSONRenderer())
    )

    # Configure standard library logging
    logging.basicConfig(
        level=level,
        handlers=[console_handler, file_handler],
        force=True,
    )

    _quiet_third_party(settings.DEBUG)

    # Configure structlog to hand events to the stdlib handlers
    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def get_module_logger(module_name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for a specific module."""
    return get_logger(f"persona_rag.{module_name}")


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get a logger for this class."""
        return get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")


cli_logger = get_module_logger("cli")
