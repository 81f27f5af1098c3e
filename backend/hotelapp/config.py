"""
Application settings
Read from environment variables and an optional .env file
"""
from typing import List, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    APP_NAME: str = "Hotel Back Office"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./hotel.db"

    # External identity provider (bearer tokens)
    OIDC_ISSUER: str = "http://localhost:9080/realms/hotel"
    OIDC_AUDIENCE: Optional[str] = None
    OIDC_ALGORITHM: str = "HS256"
    OIDC_SECRET_KEY: str = "hotel-dev-secret-change-in-production"

    # Lifecycle jobs
    SCHEDULER_ENABLED: bool = True
    AUTO_CHECKOUT_CRON: str = "0 * * * *"
    AUTO_COMPLETION_CRON: str = "0 * * * *"

    CORS_ORIGINS: str = "*"

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Global settings instance
settings = Settings()
