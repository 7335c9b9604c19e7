from enum import StrEnum
from functools import lru_cache

from src.core.settings.base import Settings as BaseSettings
from src.core.settings.local import Settings as LocalSettings
from src.core.settings.production import Settings as ProductionSettings
from src.core.settings.staging import Settings as StagingSettings


class Environment(StrEnum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


SETTINGS_BY_ENVIRONMENT: dict[Environment, type[BaseSettings]] = {
    Environment.LOCAL: LocalSettings,
    Environment.STAGING: StagingSettings,
    Environment.PRODUCTION: ProductionSettings,
}


@lru_cache
def _get_settings() -> BaseSettings:
    """
    Resolve the settings class for the ``ENVIRONMENT`` variable and instantiate it.

    Raises:
        ValueError: If ``ENVIRONMENT`` names an unknown environment
    """

    raw = BaseSettings().ENVIRONMENT.lower()

    try:
        environment = Environment(raw)
    except ValueError:
        raise ValueError(
            f"Invalid environment: {raw}. " f"Must be one of {', '.join(env.value for env in Environment)}"
        ) from None

    return SETTINGS_BY_ENVIRONMENT[environment]()


settings = _get_settings()
