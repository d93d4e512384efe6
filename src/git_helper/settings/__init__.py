"""
Settings and secrets for Git Helper.

Example:
    ```python
    from git_helper.settings import HelperSettings, YamlSecretStore, API_KEY

    settings = HelperSettings.load("~/.git-helper/config.yaml")
    store = YamlSecretStore("~/.git-helper/secrets.yaml")
    api_key = await store.get(API_KEY)

    client = ChatClient(settings.chat_config(api_key))
    ```
"""

from git_helper.settings.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_PATH,
    SECRETS_FILE_NAME,
    HelperSettings,
)
from git_helper.settings.secrets import (
    API_KEY,
    GITHUB_TOKEN,
    MemorySecretStore,
    SecretStore,
    SecretStoreError,
    YamlSecretStore,
)

__all__ = [
    # Configuration
    "HelperSettings",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_PATH",
    "CONFIG_FILE_NAME",
    "SECRETS_FILE_NAME",
    # Secrets
    "SecretStore",
    "YamlSecretStore",
    "MemorySecretStore",
    "SecretStoreError",
    "API_KEY",
    "GITHUB_TOKEN",
]
