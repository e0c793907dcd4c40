from __future__ import annotations

from pydantic import AliasChoices, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./messages.db"

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False
    DB_CREATE_SCHEMA: bool = True

    CORS_ORIGINS: list[str] = ["*"]

    # DISABLE_SWAGGER is the older name of the same switch.
    DISABLE_DOCS: bool = Field(
        default=False,
        validation_alias=AliasChoices("DISABLE_DOCS", "DISABLE_SWAGGER"),
    )

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
