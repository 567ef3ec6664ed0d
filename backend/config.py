"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Upstream SWAPI
        self.swapi_base_url: str = os.getenv("SWAPI_BASE_URL", "https://swapi.tech/api").rstrip("/")
        self.swapi_timeout: float = float(os.getenv("SWAPI_TIMEOUT", "10"))
        self.swapi_page_delay: float = float(os.getenv("SWAPI_PAGE_DELAY", "0.1"))
        self.image_base_url: str = os.getenv(
            "IMAGE_BASE_URL", "https://starwars-visualguide.com/assets/img/characters"
        ).rstrip("/")

        # Cache lifetimes, in seconds
        self.cache_default_ttl: float = float(os.getenv("CACHE_DEFAULT_TTL", "3600"))
        self.cache_sweep_interval: float = float(os.getenv("CACHE_SWEEP_INTERVAL", "300"))
        self.all_characters_ttl: float = float(os.getenv("ALL_CHARACTERS_TTL", "1800"))
        self.list_cache_ttl: float = float(os.getenv("LIST_CACHE_TTL", "1800"))
        self.detail_cache_ttl: float = float(os.getenv("DETAIL_CACHE_TTL", "3600"))
        self.related_cache_ttl: float = float(os.getenv("RELATED_CACHE_TTL", "7200"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return a list of problems with the current settings."""
        problems = []
        if not self.swapi_base_url.startswith(("http://", "https://")):
            problems.append(f"SWAPI_BASE_URL is not an http(s) URL: {self.swapi_base_url}")
        for name in ("swapi_timeout", "cache_default_ttl", "cache_sweep_interval"):
            if getattr(self, name) <= 0:
                problems.append(f"{name.upper()} must be positive")
        return problems


settings = Settings()
