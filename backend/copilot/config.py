from __future__ import annotations
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./copilot.db"

    zerion_api_key: str = ""
    coingecko_api_key: str = ""
    anthropic_api_key: str = ""

    claude_model: str = "claude-3-5-haiku-20241022"
    claude_max_tokens: int = 500
    claude_summary_max_tokens: int = 200

    frontend_url: str = "http://localhost:3000"
    extra_cors_origins: str = ""  # comma-separated additional origins for production

    # Upstream settings
    http_timeout_seconds: float = 30.0
    zerion_rate_limit: int = 5  # concurrent requests
    coingecko_rate_limit: int = 5  # concurrent requests
    coingecko_batch_size: int = 5
    coingecko_batch_delay: float = 0.2  # seconds between category batches
    wallet_top_holdings: int = 10
    wallet_recent_activity: int = 5
    wallet_transactions_page_size: int = 20

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
