"""Runtime configuration, read from ``PIPEWORK_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field, PositiveInt, StringConstraints
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PIPEWORK_", frozen=True, extra="ignore")

    #: Level of the ``pipework`` logger. Defaults to INFO.
    log_level: Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True)] = "INFO"


class Settings(LoggingSettings):
    model_config = SettingsConfigDict(
        env_prefix="PIPEWORK_",
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    #: Concurrency limit used by ``map_pool(None, ...)``.
    default_concurrency: PositiveInt = Field(default=8, validation_alias="PIPEWORK_CONCURRENCY")
    #: Number of expressions kept by ``Context.history``.
    history_limit: PositiveInt = 100


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
