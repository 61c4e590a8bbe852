"""structlog configuration shared by the API and scripts."""

import logging
import sys

import structlog

_configured = False


def configure_logging(level: str = "INFO", fmt: str = "json", force: bool = False) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        fmt: "json" for machine readable lines, "plain" for the console renderer
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
