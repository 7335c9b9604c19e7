from typing import Literal

from .base import Settings as BaseSettings


class Settings(BaseSettings):
    """Settings for the live storefront. Cart storage always goes through redis here."""

    ENVIRONMENT: Literal["local", "staging", "production"] = "production"
    CART_STORE_BACKEND: Literal["memory", "redis"] | None = "redis"
