"""
Structured logging for the AutoHub Garage API.

JSON output in deployed environments, a readable console rendition locally,
and request scoped context (request id, user id, guest id) attached to every
record emitted while a request is being handled.

Usage:
    from src.core.logging import get_logger, add_to_log_context

    logger = get_logger(__name__)

    with add_to_log_context(order_id="..."):
        logger.info("Order placed")
"""

from .config import get_logger, get_logging_config, setup_exception_logging, setup_logging
from .filters import add_to_log_context, clear_log_context, get_log_context

__all__ = [
    "setup_logging",
    "setup_exception_logging",
    "get_logger",
    "get_logging_config",
    "add_to_log_context",
    "get_log_context",
    "clear_log_context",
]
