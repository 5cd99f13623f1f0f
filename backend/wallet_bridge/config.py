from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    DATABASE_URL: str
    NONCE_SECRET_KEY: str
    SESSION_SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = ""

    # Login credential handed out by the bridge, exchanged once for a session
    LOGIN_CREDENTIAL_TTL_SECONDS: int = 300

    # Longest SIWE validity window accepted; clients default to 7 days ahead and 1 day back
    SIWE_MAX_WINDOW_SECONDS: int = 8 * 24 * 60 * 60
    SIWE_DOMAIN: str = ""
    SIWE_CHAIN_ID: Optional[int] = None

    # Wallet-only accounts get a non-routable login identifier
    PLACEHOLDER_EMAIL_DOMAIN: str = "example.com"

    @field_validator('DATABASE_URL', mode='before')
    @classmethod
    def convert_database_url(cls, v):
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()] or ["http://localhost:3000"]

settings = Settings()
