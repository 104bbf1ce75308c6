"""Configuration management with pydantic-settings for github-river.

Loads from (in order of precedence):
1. Environment variables
2. .env file in the working directory
3. Default values

The resulting config is frozen, so it can be handed to the sync worker once
at construction and shared without locking.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger("github_river.config")

__all__ = [
    "DEFAULT_API_URL",
    "Credentials",
    "RiverConfig",
    "get_config",
    "reset_config",
]

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class Credentials:
    """Username/password pair used for HTTP Basic authentication."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='**********')"

    @classmethod
    def from_config(cls, config: "RiverConfig") -> "Credentials | None":
        """Build credentials from config, or None when either half is missing."""
        password = config.github_password.get_secret_value()
        if not config.github_username or not password:
            return None
        return cls(username=config.github_username, password=password)


class RiverConfig(BaseSettings):
    """Configuration for the GitHub river.

    Attributes:
        github_owner: Repository owner (user or organisation)
        github_repositories: Repository names under the owner to sync
        github_sync_interval: Seconds to sleep between full sync cycles
        github_username: Optional Basic auth username
        github_password: Optional Basic auth password (SecretStr)
        github_api_url: GitHub REST API base URL
        github_per_page: Page size requested from list endpoints
        github_request_delay_ms: Pause after every resource-kind call
        github_failure_pause_ms: Pause after a failed fetch
        github_request_timeout: HTTP read timeout in seconds
        github_index_name: Target collection (default: github-{owner})
        qdrant_host: Qdrant server hostname
        qdrant_port: Qdrant server port
        qdrant_api_key: Optional Qdrant API key
        qdrant_use_https: Connect to Qdrant over HTTPS
        qdrant_timeout: Qdrant request timeout in seconds
        log_level: Logging level for the github_river logger
        log_format: json or text
        pushgateway_url: Prometheus Pushgateway address; empty disables push
        health_file: File touched after every completed cycle
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    # --- GitHub source ---
    github_owner: str = Field(
        default="",
        description="Owner (user or organisation) of the synced repositories",
    )
    github_repositories: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Comma-separated repository names (e.g., 'widgets,gadgets')",
    )
    github_sync_interval: int = Field(
        default=3600,
        ge=1,
        le=86400,
        description="Seconds between sync cycles (default: 3600 = 1 hour)",
    )
    github_username: str = Field(
        default="",
        description="Username for HTTP Basic authentication",
    )
    github_password: SecretStr = Field(
        default=SecretStr(""),
        description="Password or token for HTTP Basic authentication",
    )
    github_api_url: str = Field(
        default=DEFAULT_API_URL,
        description="GitHub REST API base URL (GitHub Enterprise: https://host/api/v3)",
    )
    github_per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items per page requested from list endpoints",
    )
    github_request_delay_ms: int = Field(
        default=1000,
        ge=0,
        le=60000,
        description="Pause after each resource-kind call in milliseconds",
    )
    github_failure_pause_ms: int = Field(
        default=1000,
        ge=0,
        le=60000,
        description="Pause after a failed fetch in milliseconds",
    )
    github_request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="HTTP read timeout in seconds",
    )
    github_index_name: str = Field(
        default="",
        description="Qdrant collection name (default: github-{owner})",
    )

    # --- Qdrant document store ---
    qdrant_host: str = Field(default="localhost", description="Qdrant hostname")
    qdrant_port: int = Field(default=6333, ge=1, le=65535, description="Qdrant port")
    qdrant_api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key",
    )
    qdrant_use_https: bool = Field(default=False, description="Use HTTPS for Qdrant")
    qdrant_timeout: int = Field(
        default=10,
        ge=1,
        le=300,
        description="Qdrant request timeout in seconds",
    )

    # --- Observability ---
    log_level: str = Field(
        default="INFO",
        description="DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: str = Field(
        default="json",
        description="json (production) or text (development)",
    )
    pushgateway_url: str = Field(
        default="",
        description="Prometheus Pushgateway address (host:port); empty disables push",
    )
    health_file: str = Field(
        default="/tmp/github-river.health",
        description="Health file written after every completed cycle",
    )

    @field_validator("github_repositories", mode="before")
    @classmethod
    def parse_repositories(cls, v):
        """Parse comma-separated string into list for GITHUB_REPOSITORIES."""
        if isinstance(v, str):
            return [r.strip() for r in v.split(",") if r.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: '{v}'")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "text"}:
            raise ValueError(f"Invalid log format: '{v}'. Expected 'json' or 'text'.")
        return fmt

    @field_validator("github_api_url")
    @classmethod
    def strip_api_url(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_source(self) -> "RiverConfig":
        """Repositories are meaningless without an owner."""
        if self.github_repositories and not self.github_owner:
            raise ValueError("GITHUB_OWNER required when GITHUB_REPOSITORIES is set")
        if self.github_username and not self.github_password.get_secret_value():
            logger.warning(
                "github_password_missing",
                extra={"username": self.github_username},
            )
        return self

    @property
    def index_name(self) -> str:
        """Collection the documents are written to."""
        return self.github_index_name or f"github-{self.github_owner}"

    @property
    def credentials(self) -> Credentials | None:
        return Credentials.from_config(self)

    @property
    def request_delay_seconds(self) -> float:
        return self.github_request_delay_ms / 1000.0

    @property
    def failure_pause_seconds(self) -> float:
        return self.github_failure_pause_ms / 1000.0


@lru_cache(maxsize=1)
def get_config() -> RiverConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    return RiverConfig()


def reset_config() -> None:
    """Reset configuration singleton. Only used by tests."""
    get_config.cache_clear()
