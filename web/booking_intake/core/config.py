import os
from typing import Optional, List
from functools import lru_cache
from urllib.parse import urlparse


APP_ENVIRONMENTS = ("development", "production", "test")
FORM_VARIANTS = ("basic", "extended")


class Settings:
    """Application settings read from the process environment"""

    def __init__(self):
        # Webhook forwarding
        self.WEBHOOK_URL: Optional[str] = (
            os.getenv("N8N_WEBHOOK_URL") or os.getenv("WEBHOOK_URL") or None
        )
        self.WEBHOOK_TIMEOUT: float = float(os.getenv("WEBHOOK_TIMEOUT", "10"))

        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "5000"))
        self.APP_ENV: str = os.getenv("APP_ENV", "development").lower()

        # CORS
        self.CORS_ALLOW_ORIGINS: List[str] = []
        self.CORS_ALLOW_CREDENTIALS: bool = True

        # Rate Limiting
        self.RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

        # Form
        self.FORM_VARIANT: str = os.getenv("FORM_VARIANT", "basic").lower()

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self._validate()
        self._parse_cors_origins()

    @property
    def webhook_configured(self) -> bool:
        return bool(self.WEBHOOK_URL)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def _validate(self):
        """Validate settings values"""
        if self.WEBHOOK_URL:
            parsed = urlparse(self.WEBHOOK_URL)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError("WEBHOOK_URL must be an absolute http(s) URL")
        if not 0 < self.PORT < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        if self.WEBHOOK_TIMEOUT <= 0:
            raise ValueError("WEBHOOK_TIMEOUT must be positive")
        if self.APP_ENV not in APP_ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {', '.join(APP_ENVIRONMENTS)}")
        if self.FORM_VARIANT not in FORM_VARIANTS:
            raise ValueError(f"FORM_VARIANT must be one of {', '.join(FORM_VARIANTS)}")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "*")

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
