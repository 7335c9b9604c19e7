from .limiter_config import LimiterConfig, limiter  # noqa: F401

__all__ = ["LimiterConfig", "limiter"]
