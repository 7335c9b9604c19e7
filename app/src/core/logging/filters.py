import contextvars
import logging
import os
import socket
from contextlib import contextmanager
from typing import Any, Dict, Optional

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("log_context", default={})


class ContextFilter(logging.Filter):
    """
    Enriches every record with static process information and with whatever
    the current task placed in the log context (request id, user id, ...).
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self.hostname = socket.gethostname()
        self.environment = os.getenv("ENVIRONMENT", "local")
        self.app_name = os.getenv("APP_NAME", "autohub-garage")

    def filter(self, record: logging.LogRecord) -> bool:
        record.hostname = self.hostname
        record.environment = self.environment
        record.app_name = self.app_name

        for key, value in _log_context.get().items():
            setattr(record, key, value)

        return True


class NoiseReductionFilter(logging.Filter):
    """Drops records whose message contains one of the suppressed patterns."""

    def __init__(self, name: str = "", suppress_patterns: Optional[list[str]] = None) -> None:
        super().__init__(name)
        self.suppress_patterns = suppress_patterns or ["/health"]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(pattern in message for pattern in self.suppress_patterns)


@contextmanager
def add_to_log_context(**kwargs: Any):
    """
    Temporarily add keys to the log context for the current task.

    Example:
        with add_to_log_context(user_id="123"):
            logger.info("Processing checkout")
    """
    token = _log_context.set({**_log_context.get(), **kwargs})

    try:
        yield
    finally:
        _log_context.reset(token)


def get_log_context() -> Dict[str, Any]:
    return _log_context.get()


def clear_log_context() -> None:
    _log_context.set({})
