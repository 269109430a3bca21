"""Structured logging for the API, worker and CLI.

Every process calls :func:`setup_logging` once at import time. Pipeline
steps run inside :func:`step_context`, and the shared processor chain
merges those context variables into each line, so stdlib records from
third-party libraries carry the step too.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from clip_curator.config import settings

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "celery": logging.INFO,
}


def shared_processors() -> list[Any]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(log_format: str | None = None, level: str | None = None) -> None:
    chain = shared_processors()
    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format or settings.log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel((level or settings.log_level).upper())
    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def step_context(step: str, **values: Any) -> Iterator[None]:
    """Tag log lines emitted inside the block with the running step.

    Previous context values are restored on exit, so nested steps and
    tasks sharing a worker thread do not leak into each other.
    """
    with structlog.contextvars.bound_contextvars(step=step, **values):
        yield


def preview(text: str | None, limit: int = 200) -> str:
    """Shorten a model response for log output."""
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."
