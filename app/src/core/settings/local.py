from typing import Literal

from .base import Settings as BaseSettings


class Settings(BaseSettings):
    """Settings for running the API on a developer machine or in the test suite."""

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DATABASE_ECHO: bool = False
