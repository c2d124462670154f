"""Configuration management for daily-git."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "DAILY_GIT_TOKEN"
USERNAME_ENV_VAR = "DAILY_GIT_USERNAME"


class ConfigurationError(Exception):
    """Raised when the token or username is not configured."""


class Credentials(BaseModel):
    """Access token and GitHub login used for a report run."""

    model_config = ConfigDict(frozen=True)

    token: str
    username: str

    @field_validator("token", "username")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    def __repr__(self) -> str:
        return f"Credentials(token='***', username={self.username!r})"


class Config:
    """Read daily-git settings from the environment and the config file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize config with default paths.

        Args:
            config_dir: Directory holding config.json (defaults to ~/.daily-git)
        """
        self.config_dir = config_dir or Path.home() / ".daily-git"
        self.config_file = self.config_dir / "config.json"

    def get_token(self) -> str | None:
        """Get the GitHub token.

        Returns:
            The token from DAILY_GIT_TOKEN or the config file, None otherwise
        """
        return self._get_value("token", TOKEN_ENV_VAR)

    def get_username(self) -> str | None:
        """Get the GitHub login whose commits are reported."""
        return self._get_value("username", USERNAME_ENV_VAR)

    def _get_value(self, key: str, env_var: str) -> str | None:
        value = os.environ.get(env_var)
        if value and value.strip():
            return value.strip()

        value = self._load_config().get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def _load_config(self) -> dict[str, Any]:
        """Load existing config or return empty dict."""
        if not self.config_file.exists():
            return {}

        try:
            with self.config_file.open() as f:
                config_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")
            return {}

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring config file {self.config_file}: not a JSON object")
            return {}
        return config_data


def load_credentials(config: Config) -> Credentials:
    """Load the token and username, failing before any network activity.

    Raises:
        ConfigurationError: If the token or the username is missing
    """
    token = config.get_token()
    if not token:
        raise ConfigurationError(
            "Token is missing (https://github.com/settings/tokens/new)! Set it via:\n"
            f"\texport {TOKEN_ENV_VAR}=<TOKEN>\n"
            f'or add "token": "<TOKEN>" to {config.config_file}'
        )

    username = config.get_username()
    if not username:
        raise ConfigurationError(
            "Username is missing! Set it via:\n"
            f"\texport {USERNAME_ENV_VAR}=<USERNAME>\n"
            f'or add "username": "<USERNAME>" to {config.config_file}'
        )

    return Credentials(token=token, username=username)
