"""Logging setup for the DemoDrop API.

structlog renders every record, including the plain ``logging.getLogger``
records the services emit. A pipeline run wraps itself in
``project_context`` so each line it logs carries the ``project_id``.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog

# Client libraries that log every request at INFO
NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "google_genai",
    "google_genai.models",
    "botocore",
    "boto3",
    "urllib3.connectionpool",
    "aiosqlite",
)


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Route stdlib and structlog records through one renderer on stderr.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR; unknown names mean INFO
        json_output: One JSON object per line (LOG_JSON=true) instead of the
            colored console renderer
    """
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def project_context(project_id: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with ``project_id``.

    The binding lives in a context variable, so concurrent pipeline tasks
    keep their own ids.
    """
    structlog.contextvars.bind_contextvars(project_id=project_id)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars("project_id")
