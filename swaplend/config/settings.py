"""
Configuration settings for the swap-and-lend pipeline
Manages environment variables and runtime settings
"""
from typing import List, Optional
from eth_account import Account
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from swaplend.core.exceptions import ConfigurationMissing


class Settings(BaseSettings):
    """Runtime configuration settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    DEBUG: bool = False

    # Network and credentials
    RPC_URL: Optional[str] = None
    PRIVATE_KEY: Optional[str] = None

    # Transaction confirmation
    # None waits for inclusion indefinitely
    RECEIPT_TIMEOUT: Optional[float] = None
    RECEIPT_POLL_LATENCY: float = 0.5

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_DIR: Optional[str] = None

    def missing_credentials(self) -> List[str]:
        """Names of required settings that are absent or blank"""
        missing = []
        if not (self.RPC_URL or "").strip():
            missing.append("RPC_URL")
        if not (self.PRIVATE_KEY or "").strip():
            missing.append("PRIVATE_KEY")
        return missing

    def require_credentials(self) -> None:
        """
        Raise ConfigurationMissing unless both RPC_URL and PRIVATE_KEY are set
        and PRIVATE_KEY parses as a secp256k1 key
        """
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationMissing(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

        # binascii.Error from bad hex is a ValueError too
        try:
            Account.from_key(self.PRIVATE_KEY.strip())
        except ValueError as e:
            # Never echo the key itself
            raise ConfigurationMissing(
                "PRIVATE_KEY is not a valid private key",
                missing=["PRIVATE_KEY"],
            ) from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
