"""Configuration management -- reads from environment with sensible defaults."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_seconds(name: str, default: str) -> Optional[float]:
    """Read a seconds value where ``0`` (or less) means "no deadline"."""
    value = float(os.getenv(name, default) or 0)
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    """Centralised settings read once from env vars.

    An empty credential means the matching provider is never constructed.
    """

    # --- Search providers ----------------------------------------------------
    tavily_api_key: str = field(default_factory=lambda: os.getenv("TAVILY_API_KEY", ""))
    exa_api_key: str = field(default_factory=lambda: os.getenv("EXA_API_KEY", ""))
    perplexity_api_key: str = field(
        default_factory=lambda: os.getenv("PERPLEXITY_API_KEY", "")
    )
    serper_api_key: str = field(default_factory=lambda: os.getenv("SERPER_API_KEY", ""))

    # --- Twitter / X ---------------------------------------------------------
    twitter_username: str = field(default_factory=lambda: os.getenv("TWITTER_USERNAME", ""))
    twitter_password: str = field(default_factory=lambda: os.getenv("TWITTER_PASSWORD", ""))
    twitter_email: str = field(default_factory=lambda: os.getenv("TWITTER_EMAIL", ""))
    twitter_cookies_file: str = field(
        default_factory=lambda: os.getenv("TWITTER_COOKIES_FILE", "")
    )
    twitter_auth_timeout: Optional[float] = field(
        default_factory=lambda: _optional_seconds("TWITTER_AUTH_TIMEOUT", "10")
    )

    # --- Rate limits (operation starts per second) ---------------------------
    exa_rate_limit: int = field(default_factory=lambda: int(os.getenv("EXA_RATE_LIMIT", "5")))
    perplexity_rate_limit: int = field(
        default_factory=lambda: int(os.getenv("PERPLEXITY_RATE_LIMIT", "5"))
    )
    serper_rate_limit: int = field(
        default_factory=lambda: int(os.getenv("SERPER_RATE_LIMIT", "5"))
    )

    # --- Timeouts ------------------------------------------------------------
    search_provider_timeout: Optional[float] = field(
        default_factory=lambda: _optional_seconds("SEARCH_PROVIDER_TIMEOUT", "0")
    )
    http_timeout: float = field(default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "30")))

    # --- OpenAI (verdict step) -----------------------------------------------
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    verdict_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_VERDICT_MODEL", "gpt-4o-mini")
    )

    # --- Logging -------------------------------------------------------------
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", "logs/truthseek.log"))
    analytics_file: str = field(
        default_factory=lambda: os.getenv("ANALYTICS_FILE", "logs/searches.jsonl")
    )

    # --- Input limits --------------------------------------------------------
    max_query_length: int = field(
        default_factory=lambda: int(os.getenv("MAX_QUERY_LENGTH", "500"))
    )

    @property
    def twitter_configured(self) -> bool:
        return bool(self.twitter_username and self.twitter_password)


# Module-level singleton -- import this everywhere.
settings = Settings()
