import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from src.core.config import settings


def get_logging_config() -> Dict[str, Any]:
    """
    Build the dictConfig for the current environment.

    Local runs log to stdout with the console formatter; staging and
    production emit JSON to stdout and duplicate errors to stderr.
    """
    is_local = settings.ENVIRONMENT == "local"

    if is_local:
        formatters = {"console": {"()": "src.core.logging.formatters.ConsoleFormatter"}}
        handlers = {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "console",
                "filters": ["context_filter"],
                "stream": "ext://sys.stdout",
            },
        }
    else:
        formatters = {"production": {"()": "src.core.logging.formatters.ProductionFormatter"}}
        handlers = {
            "json_stdout": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "production",
                "filters": ["context_filter", "noise_reduction"],
                "stream": "ext://sys.stdout",
            },
            "error_stderr": {
                "class": "logging.StreamHandler",
                "level": "ERROR",
                "formatter": "production",
                "filters": ["context_filter"],
                "stream": "ext://sys.stderr",
            },
        }

    handler_names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {
            "context_filter": {"()": "src.core.logging.filters.ContextFilter"},
            "noise_reduction": {
                "()": "src.core.logging.filters.NoiseReductionFilter",
                "suppress_patterns": ["/health"],
            },
        },
        "handlers": handlers,
        "root": {"level": "WARNING", "handlers": handler_names},
        "loggers": {
            "src": {
                "level": "DEBUG" if is_local else "INFO",
                "handlers": handler_names,
                "propagate": False,
            },
            "uvicorn": {"level": "INFO", "propagate": True},
            # request lifecycle is logged by RequestUtilsMiddleware
            "uvicorn.access": {"level": "WARNING", "propagate": False},
            "sqlalchemy": {"level": "WARNING", "propagate": True},
            "redis": {"level": "WARNING", "propagate": True},
        },
    }


def load_config_from_yaml(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load a dictConfig from YAML, or None when the file is missing or unreadable."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Failed to load logging config from {config_path}: {e}", file=sys.stderr)
        return None


def setup_logging(config_override: Optional[Dict[str, Any]] = None) -> None:
    """
    Configure logging from, in order of preference: ``config_override``,
    ``config/logging.<environment>.yaml``, ``config/logging.yaml`` and
    finally :func:`get_logging_config`.
    """
    config = config_override

    if config is None:
        config_dir = Path(settings.BASE_DIR) / "config"
        config = load_config_from_yaml(config_dir / f"logging.{settings.ENVIRONMENT}.yaml")
        if config is None:
            config = load_config_from_yaml(config_dir / "logging.yaml")

    if config is None:
        config = get_logging_config()

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        print(f"Failed to configure logging: {e}", file=sys.stderr)
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )


def setup_exception_logging() -> None:
    """Log uncaught exceptions at CRITICAL before the interpreter's own hook runs."""
    original_excepthook = sys.excepthook

    def handle_uncaught_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            original_excepthook(exc_type, exc_value, exc_traceback)
            return

        logging.getLogger(__name__).critical(
            "Uncaught exception, application will terminate",
            exc_info=(exc_type, exc_value, exc_traceback),
        )
        original_excepthook(exc_type, exc_value, exc_traceback)

    sys.excepthook = handle_uncaught_exception


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (pass ``__name__``)."""
    return logging.getLogger(name)
