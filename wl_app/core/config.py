# wl_app/core/config.py
from __future__ import annotations
from typing import List, Optional

from pydantic import Field, AliasChoices, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- database: a single URI wins over the discrete fields ---
    database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    mysql_host: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MYSQLHOST", "mysql_host"),
    )
    mysql_port: int = Field(
        default=3306,
        validation_alias=AliasChoices("MYSQLPORT", "mysql_port"),
    )
    mysql_user: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MYSQLUSER", "mysql_user"),
    )
    mysql_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MYSQLPASSWORD", "mysql_password"),
    )
    mysql_database: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MYSQLDATABASE", "mysql_database"),
    )
    db_pool_size: int = Field(
        default=10,
        validation_alias=AliasChoices("DB_POOL_SIZE", "db_pool_size"),
    )
    db_pool_timeout_sec: float = Field(
        default=30.0,
        validation_alias=AliasChoices("DB_POOL_TIMEOUT_SEC", "db_pool_timeout_sec"),
    )

    # --- http ---
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))
    allowed_origins_raw: str = Field(
        default="",
        validation_alias=AliasChoices("ALLOWED_ORIGINS"),
    )
    admin_token: str = Field(
        default="",
        validation_alias=AliasChoices("ADMIN_TOKEN", "admin_token"),
    )
    rate_limit_max: int = Field(
        default=200,
        validation_alias=AliasChoices("RATE_LIMIT_MAX", "rate_limit_max"),
    )
    rate_limit_window_sec: int = Field(
        default=15 * 60,
        validation_alias=AliasChoices("RATE_LIMIT_WINDOW_SEC", "rate_limit_window_sec"),
    )
    request_timeout_sec: float = Field(
        default=15.0,
        validation_alias=AliasChoices("REQUEST_TIMEOUT_SEC", "request_timeout_sec"),
    )
    max_body_bytes: int = 1024 * 1024

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _normalize(self):
        self.log_level = (self.log_level or "INFO").upper()
        return self

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins_raw.split(",") if o.strip()]


settings = Settings()


def get_settings() -> Settings:
    return settings
