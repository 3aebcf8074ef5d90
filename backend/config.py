"""Centralized configuration: all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.port: int = int(os.getenv("PORT", "3000"))

        # Durable cache
        self.cache_file: str = os.getenv("CACHE_FILE", "cache.json")
        self.cache_flush_interval: float = float(os.getenv("CACHE_FLUSH_INTERVAL_SECONDS", "60"))

        # Headless browser
        self.browser_headless: bool = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
        self.browser_max_pages: int = int(os.getenv("BROWSER_MAX_PAGES", "4"))
        self.page_acquire_timeout: float = float(os.getenv("PAGE_ACQUIRE_TIMEOUT_SECONDS", "10"))
        self.navigation_timeout_ms: int = int(os.getenv("NAVIGATION_TIMEOUT_MS", "30000"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of env vars whose values are unusable."""
        positive = [
            "CACHE_FLUSH_INTERVAL_SECONDS",
            "BROWSER_MAX_PAGES",
            "PAGE_ACQUIRE_TIMEOUT_SECONDS",
            "NAVIGATION_TIMEOUT_MS",
        ]
        return [var for var in positive if getattr(self, _attr_for(var)) <= 0]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "CACHE_FLUSH_INTERVAL_SECONDS": "cache_flush_interval",
        "PAGE_ACQUIRE_TIMEOUT_SECONDS": "page_acquire_timeout",
    }
    return mapping.get(env_var, env_var.lower())
