from functools import lru_cache
from typing import Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMOBI_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "imobi"
    log_level: str = "INFO"

    use_live_connectors: bool = False
    live_connectors: List[str] = ["vivareal", "mercadolivre"]
    generic_sources: Dict[str, str] = {}

    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    respect_robots: bool = True
    request_timeout_seconds: float = 5.0
    browser_timeout_seconds: float = 30.0
    browser_settle_ms: int = 2000
    headless: bool = True

    max_pages: int = 1
    page_delay_seconds: float = 1.0
    listing_limit: int = 10
    generic_container_min_count: int = 6

    max_workers: Optional[int] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
