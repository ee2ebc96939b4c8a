"""
Settings for qbit-remote, loaded from the environment or a ``.env`` file.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class ClientSettings(BaseSettings):
    """Connection and logging settings. Environment variables use the QBIT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="QBIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection
    url: str = ""
    username: str = "admin"
    password: str = ""
    timeout: float = 30.0
    verify_ssl: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_file: Optional[str] = None

    def require_url(self) -> str:
        """Return the configured base URL or raise ConfigurationError."""
        if not self.url:
            raise ConfigurationError(
                "qBittorrent URL is not configured",
                "pass --url or set QBIT_URL",
            )
        return self.url
