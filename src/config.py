from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "RecipeLens"
    debug: bool = False

    database_url: str = "sqlite:///./recipelens.db"

    fetch_timeout_seconds: float = 12.0
    strategy_timeout_seconds: float = 20.0

    desktop_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    mobile_user_agent: str = (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
    )

    recipe_proxy_url: Optional[str] = None
    recipe_mirror_url: Optional[str] = "https://r.jina.ai/"

    sandbox_settle_ms: int = 250
    sandbox_challenger_settle_ms: int = 800
    sandbox_timeout_seconds: float = 15.0

    pattern_min_success_rate: float = 0.5
    pattern_min_samples: int = 3
    raw_html_sample_chars: int = 5000

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
