"""Configuration management for driveup.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml

from driveup.core.exceptions import ConfigurationError, ProfileNotFoundError
from driveup.core.timeouts import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)

if TYPE_CHECKING:
    from driveup.uploaders.options import UploadOptions

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "driveup"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_GRAPH_URL = "https://graph.microsoft.com/v1.0"

# Environment variable names
ENV_DRIVE_ID = "DRIVEUP_DRIVE_ID"
ENV_GRAPH_URL = "DRIVEUP_GRAPH_URL"
ENV_TOKEN = "DRIVEUP_TOKEN"
ENV_PROFILE = "DRIVEUP_PROFILE"
ENV_TIMEOUT = "DRIVEUP_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for one drive."""

    drive_id: str
    graph_url: str = DEFAULT_GRAPH_URL
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    chunk_size: Optional[int] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    directory_conflict_behavior: str = "ignore"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "drive_id": self.drive_id,
            "graph_url": self.graph_url,
            "timeout": self.timeout,
            "request_timeout": self.request_timeout,
            "directory_conflict_behavior": self.directory_conflict_behavior,
        }
        if self.chunk_size is not None:
            data["chunk_size"] = self.chunk_size
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            drive_id=data.get("drive_id", ""),
            graph_url=data.get("graph_url", DEFAULT_GRAPH_URL),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
            chunk_size=data.get("chunk_size"),
            request_timeout=data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT_SECONDS),
            directory_conflict_behavior=data.get("directory_conflict_behavior", "ignore"),
        )

    def upload_options(self, **overrides: Any) -> "UploadOptions":
        """Build validated upload options from this profile.

        Args:
            **overrides: Option values taking precedence over the profile.
                ``None`` values are ignored.

        Returns:
            Frozen UploadOptions.

        Raises:
            ValidationError: If any option is invalid.
        """
        from driveup.uploaders.options import UploadOptions

        values: dict[str, Any] = {
            "request_timeout": self.request_timeout,
            "directory_conflict_behavior": self.directory_conflict_behavior,
        }
        if self.chunk_size is not None:
            values["chunk_size"] = self.chunk_size
        values.update({k: v for k, v in overrides.items() if v is not None})
        return UploadOptions(**values)


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file exists but cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        # Environment variable overrides
        if drive_id := os.getenv(ENV_DRIVE_ID):
            try:
                timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_HTTP_TIMEOUT_SECONDS)))
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid {ENV_TIMEOUT}", field="timeout", value=os.getenv(ENV_TIMEOUT)
                ) from e

            config.profiles["default"] = Profile(
                drive_id=drive_id,
                graph_url=os.getenv(ENV_GRAPH_URL, DEFAULT_GRAPH_URL),
                timeout=timeout,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file (never includes the access token).

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Args:
            name: Profile name. If None, uses default_profile.

        Returns:
            Profile configuration.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles


def get_token() -> Optional[str]:
    """Get the bearer token from the environment.

    Returns:
        Token if set, None otherwise.
    """
    return os.getenv(ENV_TOKEN)
