"""Application settings and configuration management."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Connection URL of the backing Redis store",
    )

    # Deployment
    barangay_name: str = Field(
        default="Kabacsanan",
        description="Barangay every household belongs to in this deployment",
    )
    default_city: str = Field(default="Default City")
    default_province: str = Field(default="Default Province")

    # Record Store Behaviour
    validate_household_reference: bool = Field(
        default=False,
        description="Reject residents whose householdId names no existing household",
    )
    default_page_size: int = Field(default=10, ge=1, le=100)

    # Credentials
    password_hash_iterations: int = Field(
        default=1000,
        ge=1,
        description="PBKDF2 iterations; existing hashes were written with 1000",
    )
    admin_username: str = Field(default="admin")
    admin_email: str = Field(default="admin@barangaykabacsanan.gov.ph")
    admin_password: str = Field(
        default="admin123",
        description="Initial admin password, change after first login",
    )
    admin_full_name: str = Field(default="System Administrator")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/barangay_registry.log", description="Main log file")

    @field_validator("log_file")
    @classmethod
    def expand_user_path(cls, v: str) -> str:
        """Expand user home directory in paths."""
        return str(Path(v).expanduser())

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Loguru level names are upper case."""
        return v.upper()


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
