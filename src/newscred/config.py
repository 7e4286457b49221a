from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


class Settings(BaseSettings):
    """Configuration sourced from environment variables."""

    version: str = "1.0.0"
    title: str = "NewsCred Credibility Service"

    redis_url: str = "redis://localhost:6379"
    data_dir: str = str(DEFAULT_DATA_DIR)

    history_limit: int = Field(100, gt=0)
    max_article_length: int = Field(5000, gt=0)
    max_text_length: int = Field(10000, gt=0)

    rate_limit_requests: int = Field(100, gt=0)
    rate_limit_window_minutes: int = Field(60, gt=0)

    cors_origins: str = "*"
    debug: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "case_sensitive": False,
    }

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache(1)
def get_settings() -> Settings:
    return Settings()
