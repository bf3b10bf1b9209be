"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./ledger.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class LedgerSettings(BaseModel):
    # ceiling for any typed amount, in major units
    max_amount: int = Field(default=1_000_000, gt=0)
    description_max_length: int = Field(default=100, ge=1)
    cancel_list_limit: int = Field(default=10, ge=1)
    history_limit: int = Field(default=5, ge=1)


class RateSettings(BaseModel):
    base_url: str = "https://api.frankfurter.dev/v1"
    timeout: float = Field(default=5.0, gt=0)
    enabled: bool = True


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "Ledger Bot"
    api_prefix: str = "/api"

    database: DatabaseSettings = DatabaseSettings()
    ledger: LedgerSettings = LedgerSettings()
    rates: RateSettings = RateSettings()

    @property
    def database_url(self) -> str:
        return self.database.url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
