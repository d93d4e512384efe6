"""
Secret storage for the API key and GitHub token.

Secrets are kept apart from `HelperSettings` so they are never echoed back
to the presentation layer or written into the settings file.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

API_KEY = "apiKey"
GITHUB_TOKEN = "githubToken"


class SecretStoreError(Exception):
    """Raised when the secret store cannot be read or written."""

    def __init__(self, message: str, *, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key


class SecretStore(ABC):
    """Async key/value store for secrets."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored secret, or None if it is not set."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a secret, replacing any previous value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a secret. Deleting an absent key is not an error."""
        ...


class MemorySecretStore(SecretStore):
    """In-process secret store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)


class YamlSecretStore(SecretStore):
    """
    Secret store backed by a YAML file readable only by its owner.

    File format:
        ```yaml
        apiKey: sk-...
        githubToken: gho_...
        ```

    Example:
        ```python
        store = YamlSecretStore("~/.git-helper/secrets.yaml")
        await store.set(GITHUB_TOKEN, token)
        ```
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise SecretStoreError(f"Failed to read secrets from {self.path}: {e}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SecretStoreError(f"Invalid secrets file: {self.path}")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=True))
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise SecretStoreError(f"Failed to write secrets to {self.path}: {e}")

    def _update(self, key: str, value: Optional[str]) -> None:
        data = self._read()
        if value is None:
            if key not in data:
                return
            data.pop(key)
        else:
            data[key] = value
        self._write(data)
        logger.debug(f"Secret '{key}' {'removed' if value is None else 'stored'}")

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._update, key, None)
