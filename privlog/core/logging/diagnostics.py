"""Loggers for the pipeline's own diagnostics.

Diagnostics live under the ``privlog`` stdlib logger tree and carry their
processor chain with them, so the host application's structlog
configuration is neither needed nor touched. Until ``configure_logging``
attaches a handler, the tree only has a ``NullHandler`` and stays silent
below the stdlib default of WARNING.
"""

import logging
from typing import Any

import structlog

DIAGNOSTICS_LOGGER = "privlog"

logging.getLogger(DIAGNOSTICS_LOGGER).addHandler(logging.NullHandler())


def create_processor_chain() -> list:
    """Create the diagnostics processor chain.

    Returns:
    -------
        List of processors shared by bound loggers and foreign records

    """
    from .filters import Redactor

    # Redaction runs FIRST so nothing downstream sees raw values
    return [
        Redactor(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def get_logger(name: str | None = None, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Get a diagnostics logger instance.

    Args:
    ----
        name: Logger name. Names outside the ``privlog`` tree are nested under it.
        **kwargs: Additional context to bind to the logger

    Returns:
    -------
        structlog logger wrapping a stdlib logger of the ``privlog`` tree

    """
    if not name:
        name = DIAGNOSTICS_LOGGER
    elif name != DIAGNOSTICS_LOGGER and not name.startswith(f"{DIAGNOSTICS_LOGGER}."):
        name = f"{DIAGNOSTICS_LOGGER}.{name}"

    logger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            *create_processor_chain(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )

    if kwargs:
        logger = logger.bind(**kwargs)

    return logger
