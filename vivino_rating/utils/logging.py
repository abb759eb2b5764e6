"""structlog configuration for the rating resolver.

Every log call in the package goes through :func:`get_logger`, which emits
key-value events such as ``fetch_candidate_failed url=... attempt=2``.
Two renderers share one processor chain:

* ``ConsoleRenderer`` for local development (coloured, one line per event)
* ``JSONRenderer`` when ``APP_ENV=production`` or ``json_output=True``

Standard-library loggers (httpx, httpcore, aiosqlite) are routed through
the same renderer.  They are held at WARNING unless the configured level is
DEBUG, so one lookup does not print a wall of connection chatter.
"""

import logging
import os
import sys

import structlog

# Third-party loggers that are chatty at INFO.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "aiosqlite")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    noisy_loggers: tuple[str, ...] = NOISY_LOGGERS,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON rendering regardless of ``APP_ENV``.
        noisy_loggers: Stdlib loggers capped at WARNING unless *log_level*
            is DEBUG.

    Returns:
        The root structlog logger.
    """
    level_name = log_level.upper()
    level = logging.getLevelName(level_name)
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level_name)

    third_party_level = logging.DEBUG if level_name == "DEBUG" else logging.WARNING
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(third_party_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
