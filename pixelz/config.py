"""
Centralized Configuration Management

This module loads and validates pixelz configuration from environment
variables and .env files, organised in nested sections. There is no global
settings instance: the command layer builds one per process with
create_settings() and hands it to make_pixelz().
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DEPLOYMENT_CONFIG_FILE = "pixelz-deployment.json"


class IPFSConfig(BaseSettings):
    """IPFS node configuration."""

    model_config = SettingsConfigDict(env_prefix="IPFS_")

    api_url: str = "http://localhost:5001"
    gateway_url: str = "http://localhost:8080/ipfs"
    timeout: float = 60.0


class PinningConfig(BaseSettings):
    """Remote pinning service configuration."""

    model_config = SettingsConfigDict(env_prefix="PINNING_")

    service_name: Optional[str] = None
    endpoint: Optional[str] = None
    api_key: Optional[str] = None

    def is_configured(self) -> bool:
        """Check if a remote pinning service is fully configured."""
        return bool(self.service_name and self.endpoint and self.api_key)


class EthereumConfig(BaseSettings):
    """Ethereum node and signer configuration."""

    model_config = SettingsConfigDict(env_prefix="ETH_")

    rpc_url: str = "http://localhost:8545"
    network: str = "localhost"
    private_key: Optional[str] = None
    artifact_path: str = "artifacts/contracts/Pixelz.sol/Pixelz.json"


class AppConfig(BaseSettings):
    """Application configuration with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    deployment_config_file: str = DEFAULT_DEPLOYMENT_CONFIG_FILE
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None

    # Nested configuration sections
    ipfs: IPFSConfig = Field(default_factory=IPFSConfig)
    pinning: PinningConfig = Field(default_factory=PinningConfig)
    ethereum: EthereumConfig = Field(default_factory=EthereumConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v


def create_settings(**overrides) -> AppConfig:
    """Create a settings instance from environment variables and .env files."""
    return AppConfig(**overrides)
