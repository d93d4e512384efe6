"""Tests for settings and secret storage."""

import json
import os
import stat
import tempfile
from pathlib import Path

import pytest

from git_helper.context import HelperContext
from git_helper.settings import (
    API_KEY,
    GITHUB_TOKEN,
    HelperSettings,
    MemorySecretStore,
    SecretStoreError,
    YamlSecretStore,
)


class TestHelperSettings:
    """Tests for HelperSettings."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        for name in list(os.environ):
            if name.startswith("GIT_HELPER_"):
                monkeypatch.delenv(name)

        settings = HelperSettings()
        assert settings.provider == "openai"
        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.model_name == "gpt-4o-mini"
        assert settings.github_scopes == ["repo", "read:org", "user:email", "workflow"]

    def test_environment_overrides(self, monkeypatch):
        """Test GIT_HELPER_* environment variables."""
        monkeypatch.setenv("GIT_HELPER_MODEL_NAME", "grok-beta")
        monkeypatch.setenv("GIT_HELPER_GITHUB_CLIENT_ID", "Iv1.env")

        settings = HelperSettings()
        assert settings.model_name == "grok-beta"
        assert settings.github_client_id == "Iv1.env"

    def test_url_normalization(self):
        """Test that trailing slashes are removed."""
        settings = HelperSettings(base_url="https://api.x.ai/v1/", github_url="https://github.com/")
        assert settings.base_url == "https://api.x.ai/v1"
        assert settings.github_url == "https://github.com"

    def test_save_and_load_yaml(self):
        """Test a YAML round trip with owner-only permissions."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "config.yaml"
            HelperSettings(provider="glm", model_name="glm-4").save(path)

            assert stat.S_IMODE(path.stat().st_mode) == 0o600
            loaded = HelperSettings.from_file(path)
            assert loaded.provider == "glm"
            assert loaded.model_name == "glm-4"

    def test_load_json(self):
        """Test loading a JSON file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text(json.dumps({"provider": "grok", "base_url": "https://api.x.ai/v1"}))

            settings = HelperSettings.from_file(path)
            assert settings.provider == "grok"

    def test_from_file_missing(self):
        """Test that a missing file is an error."""
        with pytest.raises(FileNotFoundError):
            HelperSettings.from_file("/nonexistent/config.yaml")

    def test_load_missing_uses_defaults(self):
        """Test that load() tolerates a missing file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = HelperSettings.load(Path(tmpdir) / "config.yaml")
            assert isinstance(settings, HelperSettings)

    def test_updated_ignores_empty_values(self):
        """Test that empty changes keep the current values."""
        settings = HelperSettings(provider="openai", model_name="gpt-4o")
        updated = settings.updated(provider="grok", model_name="", base_url=None)

        assert updated.provider == "grok"
        assert updated.model_name == "gpt-4o"
        assert settings.provider == "openai"

    def test_chat_config(self):
        """Test deriving the chat endpoint configuration."""
        settings = HelperSettings(base_url="https://llm.example/v1", model_name="m1")
        config = settings.chat_config("sk-1")

        assert config.base_url == "https://llm.example/v1"
        assert config.model == "m1"
        assert config.get_api_key() == "sk-1"

    def test_secrets_not_in_settings(self):
        """Test that settings carry no secret fields."""
        data = HelperSettings().to_dict()
        assert API_KEY not in data
        assert GITHUB_TOKEN not in data
        assert "api_key" not in data


class TestSecretStores:
    """Tests for the secret stores."""

    @pytest.mark.asyncio
    async def test_memory_store(self):
        """Test the in-process store."""
        store = MemorySecretStore({API_KEY: "sk-1"})

        assert await store.get(API_KEY) == "sk-1"
        await store.set(GITHUB_TOKEN, "gho_1")
        assert await store.get(GITHUB_TOKEN) == "gho_1"
        await store.delete(GITHUB_TOKEN)
        await store.delete(GITHUB_TOKEN)
        assert await store.get(GITHUB_TOKEN) is None

    @pytest.mark.asyncio
    async def test_yaml_store(self):
        """Test the file-backed store."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "secrets.yaml"
            store = YamlSecretStore(path)

            assert await store.get(API_KEY) is None
            await store.set(API_KEY, "sk-1")
            await store.set(GITHUB_TOKEN, "gho_1")

            assert stat.S_IMODE(path.stat().st_mode) == 0o600
            assert await YamlSecretStore(path).get(GITHUB_TOKEN) == "gho_1"

            await store.delete(GITHUB_TOKEN)
            assert await store.get(GITHUB_TOKEN) is None
            assert await store.get(API_KEY) == "sk-1"

    @pytest.mark.asyncio
    async def test_yaml_store_corrupt_file(self):
        """Test that an unreadable file raises SecretStoreError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "secrets.yaml"
            path.write_text("- just\n- a list\n")

            with pytest.raises(SecretStoreError):
                await YamlSecretStore(path).get(API_KEY)


class TestHelperContext:
    """Tests for HelperContext."""

    def test_create(self):
        """Test building a context from a config directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            HelperSettings(model_name="saved-model").save(Path(tmpdir) / "config.yaml")

            context = HelperContext.create(tmpdir, config_dir=tmpdir)

            assert context.settings.model_name == "saved-model"
            assert context.settings_path == Path(tmpdir) / "config.yaml"
            assert isinstance(context.secrets, YamlSecretStore)
            assert context.secrets.path == Path(tmpdir) / "secrets.yaml"
            assert context.working_directory == Path(tmpdir)

    def test_save_settings(self):
        """Test persisting and switching settings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            context = HelperContext.create(config_dir=tmpdir, secrets=MemorySecretStore())
            context.save_settings(context.settings.updated(provider="grok"))

            assert context.settings.provider == "grok"
            assert HelperSettings.from_file(context.settings_path).provider == "grok"
