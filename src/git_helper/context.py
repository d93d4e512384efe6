"""
Explicit context shared by the session and the CLI.

Everything that would otherwise be process-wide state (settings, where they
are saved, the secret store, the workspace) is bundled here and passed
around by hand.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git_helper.settings import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_DIR,
    SECRETS_FILE_NAME,
    HelperSettings,
    SecretStore,
    YamlSecretStore,
)


@dataclass
class HelperContext:
    """Settings, secret store and workspace for one helper instance."""

    settings: HelperSettings
    settings_path: Path
    secrets: SecretStore
    working_directory: Optional[Path] = None

    @classmethod
    def create(
        cls,
        working_directory: Optional[Union[str, Path]] = None,
        *,
        config_dir: Optional[Union[str, Path]] = None,
        secrets: Optional[SecretStore] = None,
    ) -> "HelperContext":
        """
        Build a context from files in the config directory.

        Args:
            working_directory: Workspace folder; None means no workspace is open
            config_dir: Directory holding config.yaml and secrets.yaml
                (default ~/.git-helper)
            secrets: Secret store to use instead of the YAML file store

        Returns:
            A new HelperContext
        """
        config_dir = Path(config_dir or DEFAULT_CONFIG_DIR).expanduser()
        settings_path = config_dir / CONFIG_FILE_NAME

        return cls(
            settings=HelperSettings.load(settings_path),
            settings_path=settings_path,
            secrets=secrets or YamlSecretStore(config_dir / SECRETS_FILE_NAME),
            working_directory=Path(working_directory) if working_directory else None,
        )

    def save_settings(self, settings: HelperSettings) -> None:
        """Persist settings and make them current."""
        settings.save(self.settings_path)
        self.settings = settings
