from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    All settings can be configured via ``REQUESTGUARD_*`` environment
    variables or a .env file. Values passed explicitly to the rate limiter
    constructors always take precedence over these defaults.
    """

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # Default counter store settings
    store_max_items: Optional[int] = None  # None = unbounded
    store_sweep_interval: int = 1000  # ms between sweeps of expired entries

    # Cookie plugin defaults
    cookie_max_age: int = 60 * 60 * 24 * 7  # 7 days
    cookie_same_site: str = "strict"
    cookie_path: str = "/"
    cookie_http_only: bool = True
    cookie_secure: bool = False
    cookie_id_bytes: int = 16  # Entropy of the random cookie identifier

    # Header set by a trusted proxy carrying the real client address
    trusted_ip_header: str = "cf-connecting-ip"

    # Digest used for counter keys and cookie signatures (any hashlib name)
    hash_algorithm: str = "sha256"

    @field_validator("store_max_items")
    @classmethod
    def validate_max_items(cls, v: Optional[int]) -> Optional[int]:
        """Validate the store cap is positive when set."""
        if v is not None and v < 1:
            raise ValueError("store_max_items must be at least 1")
        return v

    @field_validator("cookie_max_age", "cookie_id_bytes", "store_sweep_interval")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate cookie and store values are positive."""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @field_validator("cookie_same_site")
    @classmethod
    def validate_same_site(cls, v: str) -> str:
        """Validate the SameSite attribute is one Starlette accepts."""
        v = v.lower()
        if v not in ("strict", "lax", "none"):
            raise ValueError("cookie_same_site must be strict, lax or none")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "structured", "json"):
            raise ValueError("log_format must be text, structured or json")
        return v

    model_config = SettingsConfigDict(
        env_prefix="REQUESTGUARD_", env_file=".env", extra="ignore"
    )


# Global settings instance
settings = Settings()
