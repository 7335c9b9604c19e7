import secrets
import warnings
from pathlib import Path
from typing import Annotated, Any, Literal, Self

from dotenv import load_dotenv
from pydantic import AnyUrl, BeforeValidator, RedisDsn, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


def parse_cors(v: Any) -> list[str]:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list):
        return v
    elif isinstance(v, str):
        return [v]
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    BASE_DIR: str = str(Path(__file__).resolve().parent.parent.parent.parent)

    APP_NAME: str = "AutoHub Garage"
    APP_DESCRIPTION: str = "AutoHub Garage storefront and order management API"
    APP_VERSION: str = "0.1.0"
    OPENAPI_DOCS_URL: str = "/docs"
    OPENAPI_JSON_SCHEMA_URL: str = "/openapi.json"
    AUTH_SECRET_KEY: str = secrets.token_hex(64)
    AUTH_TOKEN_MAX_AGE: int = 60 * 60 * 8  # 8 hours
    DOMAIN: str = "localhost"
    PORT: str = "8000"
    V1_STR: str = "v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_NAMESPACE: str = "autohub_base_throttler"
    CHECKOUT_RATE_LIMIT: str = "10/minute"

    CURRENCY_CODE: str = "UGX"
    CURRENCY_LOCALE: str = "en_UG"

    CART_STORE_BACKEND: Literal["memory", "redis"] | None = None
    CART_STORE_KEY_PREFIX: str = "autohub"
    CART_STORE_CHANNEL_PREFIX: str = "cart-updated"
    CART_STORE_TTL: int | None = 60 * 60 * 24 * 30  # 30 days
    CART_STORE_REDIS_DB: int = 1

    ORDER_STRICT_STATUS_TRANSITIONS: bool = True
    ORDER_NUMBER_PREFIX: str = "ORD"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SERVER_URL(self) -> str:
        if self.ENVIRONMENT == "local":
            return f"http://{self.DOMAIN}:{self.PORT}"
        return f"https://{self.DOMAIN}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def API_V1_STR(self) -> str:
        return f"/api/{self.V1_STR}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def CART_STORE_PROVIDER(self) -> str:
        if self.CART_STORE_BACKEND:
            return self.CART_STORE_BACKEND
        return "memory" if self.ENVIRONMENT == "local" else "redis"

    BACKEND_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = []

    DATABASE_URL: str | None = None
    DATABASE_ECHO: bool = False
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "changethis"
    POSTGRES_DB: str = "autohub"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def _build_redis_url(self, db: int) -> RedisDsn:
        if self.REDIS_PASSWORD:
            return RedisDsn.build(
                scheme="redis",
                host=self.REDIS_HOST,
                port=self.REDIS_PORT,
                password=self.REDIS_PASSWORD,
                path=f"{db}",
            )

        return RedisDsn.build(
            scheme="redis",
            host=self.REDIS_HOST,
            port=self.REDIS_PORT,
            path=f"{db}",
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def CART_STORE_REDIS_URL(self) -> RedisDsn:
        return self._build_redis_url(self.CART_STORE_REDIS_DB)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def THROTTLER_REDIS_URL(self) -> RedisDsn:
        return self._build_redis_url(2)

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", ' "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT in ["local", "staging"]:
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("AUTH_SECRET_KEY", self.AUTH_SECRET_KEY)
        if not self.DATABASE_URL:
            self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)

        return self
