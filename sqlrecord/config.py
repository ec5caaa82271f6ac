"""
Configuration settings for sqlrecord.

Uses Pydantic Settings to load the MySQL connection values, logging options,
and query defaults from the environment. Values are also read from `.env`
and from an environment-specific `.env.<APP_ENV>` file when present.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(3306, alias="DB_PORT")
    db_user: str = Field("root", alias="DB_USER")
    db_password: str = Field("", alias="DB_PASS")
    db_name: str = Field("app", alias="DB_DB")
    db_schema: Optional[str] = Field(None, alias="DB_SCHEMA")

    # Pool / execution
    pool_max_size: int = Field(32, alias="DB_POOL_MAX")
    query_retries: int = Field(3, alias="DB_RETRIES")

    # DATE_FORMAT patterns used for date/datetime projections
    date_format: str = Field("%Y-%m-%d", alias="SQL_DATE_FORMAT")
    datetime_format: str = Field("%Y-%m-%d %H:%i:%s", alias="SQL_DATETIME_FORMAT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=(".env", f".env.{os.getenv('APP_ENV', 'development')}"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def schema_name(self) -> str:
        """Schema used to filter INFORMATION_SCHEMA lookups."""
        return self.db_schema or self.db_name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
