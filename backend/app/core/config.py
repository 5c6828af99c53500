"""
PBU Records Application Configuration
Pydantic Settings for environment variable management
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "PBU Records"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5001

    # Database (PostgreSQL)
    DATABASE_URL: str = Field(..., description="PostgreSQL connection string")
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False
    DB_AUTO_CREATE: bool = False

    # CORS (comma-separated string, parsed in main.py)
    CORS_ORIGINS: str = (
        "https://vwg-frontend.vercel.app,"
        "https://vwg-frontend-alpha.vercel.app,"
        "http://localhost:3000"
    )

    # Security
    SECRET_KEY: str = Field(..., min_length=32, description="Secret key for JWT")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 10

    # Records
    # Drafts share the created_at column with finalized snapshots, so they
    # show up in year browsing unless this is switched off.
    YEARS_INCLUDE_DRAFTS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
