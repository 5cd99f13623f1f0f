from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class ClientSettings(BaseSettings):
    """Client-side settings, read from WALLET_BRIDGE_* env vars."""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="WALLET_BRIDGE_", extra="ignore")

    BASE_URL: str = "http://localhost:8000"
    TIMEOUT_SECONDS: float = 30.0

    # SIWE validity window requested from the wallet
    SIWE_EXPIRATION_SECONDS: int = 7 * 24 * 60 * 60
    SIWE_NOT_BEFORE_SECONDS: int = 24 * 60 * 60
    SIWE_DOMAIN: str = "localhost:3000"
    SIWE_URI: str = "http://localhost:3000"
    SIWE_CHAIN_ID: Optional[int] = None
