"""
Git Helper configuration.

This module provides the non-secret settings record: which chat model to
talk to and which GitHub OAuth app to authenticate with. Secrets (API key,
GitHub token) live in the secret store, never here.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from git_helper.github.device_flow import DEFAULT_SCOPES
from git_helper.llm.config import ChatConfig

DEFAULT_CONFIG_DIR = Path("~/.git-helper")
CONFIG_FILE_NAME = "config.yaml"
SECRETS_FILE_NAME = "secrets.yaml"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / CONFIG_FILE_NAME


class HelperSettings(BaseSettings):
    """
    Settings for the chat endpoint and GitHub login.

    Values come from (highest priority first) explicit arguments, a
    config file loaded with `from_file`, and `GIT_HELPER_*` environment
    variables.

    Example:
        ```python
        settings = HelperSettings(
            provider="openai",
            base_url="https://api.openai.com/v1",
            model_name="gpt-4o-mini",
        )

        # Load from file
        settings = HelperSettings.from_file("~/.git-helper/config.yaml")
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="GIT_HELPER_",
        extra="ignore",
        protected_namespaces=(),
    )

    provider: str = Field(
        default="openai",
        description="Chat provider label (openai, grok, glm, ...)",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible API base URL",
    )
    model_name: str = Field(
        default="gpt-4o-mini",
        description="Model name to use",
    )
    github_client_id: str = Field(
        default="",
        description="Client ID of the GitHub OAuth app used for device-flow login",
    )
    github_scopes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SCOPES),
        description="Scopes requested during device-flow login",
    )
    github_url: str = Field(
        default="https://github.com",
        description="GitHub base URL (device and token endpoints)",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL (GraphQL and REST)",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    @field_validator("base_url", "github_url", "github_api_url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Normalize URL by removing trailing slash."""
        return v.rstrip("/")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "HelperSettings":
        """
        Load settings from a YAML or JSON file.

        File format (YAML):
            ```yaml
            provider: openai
            base_url: https://api.openai.com/v1
            model_name: gpt-4o-mini
            github_client_id: Iv1.0123456789abcdef
            ```

        Args:
            path: Path to configuration file

        Returns:
            Loaded HelperSettings instance

        Raises:
            FileNotFoundError: If the config file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text()

        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        return cls(**(data or {}))

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "HelperSettings":
        """Load from a file if it exists, otherwise from the environment alone."""
        path = Path(path or DEFAULT_CONFIG_PATH).expanduser()
        if path.exists():
            return cls.from_file(path)
        return cls()

    def updated(self, **changes: Any) -> "HelperSettings":
        """Return a copy with the given non-empty fields replaced."""
        data = self.to_dict()
        data.update({k: v for k, v in changes.items() if v})
        return type(self)(**data)

    def to_dict(self) -> dict[str, Any]:
        """Export settings to a dictionary."""
        return self.model_dump(mode="json")

    def save(self, path: Union[str, Path] = DEFAULT_CONFIG_PATH, format: str = "yaml") -> None:
        """
        Save settings to a file.

        Args:
            path: Output file path
            format: Output format ('yaml' or 'json')
        """
        path = Path(path).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.to_dict()

        if format == "yaml":
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(data, indent=2)

        path.write_text(content)
        os.chmod(path, 0o600)

    def chat_config(self, api_key: Optional[str]) -> ChatConfig:
        """Chat endpoint configuration for these settings."""
        return ChatConfig(
            provider=self.provider,
            base_url=self.base_url,
            model=self.model_name,
            api_key=api_key,
        )
