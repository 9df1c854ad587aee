"""
Structured Logging

DESIGN DECISION: All modules log through structlog with event names
and keyword context rather than formatted strings. This keeps log lines
machine-readable (JSON) while staying cheap to write.

Call configure_logging() once at startup; get_logger() is safe to call
at import time because loggers are created lazily.
"""

import logging

import structlog


_configured = False


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for local logging (idempotent)."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
