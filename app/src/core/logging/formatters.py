import traceback
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

DEFAULT_RENAME_FIELDS = {
    "levelname": "level",
    "asctime": "timestamp",
    "name": "logger",
}

PRODUCTION_RENAME_FIELDS = {
    **DEFAULT_RENAME_FIELDS,
    "pathname": "file_path",
    "lineno": "line_number",
    "funcName": "function_name",
    "process": "process_id",
}


class StructuredExceptionJsonFormatter(JsonFormatter):
    """
    JSON formatter that emits exceptions as an ``exception`` object
    (type, message, traceback lines) instead of a flat ``exc_info`` string.
    """

    def __init__(self, **kwargs: Any) -> None:
        # dictConfig passes ``format`` rather than ``fmt``
        if "format" in kwargs:
            kwargs["fmt"] = kwargs.pop("format")
        super().__init__(**{k: v for k, v in kwargs.items() if v is not None})

    def add_fields(self, log_record: Dict[str, Any], record: Any, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if not record.exc_info:
            return

        exc_type, exc_value, exc_traceback = record.exc_info
        log_record["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "traceback": (
                traceback.format_exception(exc_type, exc_value, exc_traceback) if exc_traceback else None
            ),
        }
        log_record.pop("exc_info", None)
        log_record.pop("exc_text", None)


class ConsoleFormatter(StructuredExceptionJsonFormatter):
    """Compact JSON lines for local development."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("format", "%(asctime)s %(name)s %(levelname)s %(message)s")
        kwargs.setdefault("datefmt", "%Y-%m-%d %H:%M:%S")
        kwargs["rename_fields"] = {**DEFAULT_RENAME_FIELDS, **(kwargs.get("rename_fields") or {})}
        super().__init__(**kwargs)


class ProductionFormatter(StructuredExceptionJsonFormatter):
    """Full-fidelity JSON lines for staging and production."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault(
            "format",
            "%(asctime)s %(name)s %(levelname)s %(message)s %(pathname)s %(lineno)d %(funcName)s %(process)d",
        )
        kwargs.setdefault("datefmt", "%Y-%m-%dT%H:%M:%S")
        kwargs["rename_fields"] = {**PRODUCTION_RENAME_FIELDS, **(kwargs.get("rename_fields") or {})}
        super().__init__(**kwargs)
