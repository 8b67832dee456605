"""
Unit Tests: Settings
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import (
    Settings,
    StorageSettings,
    get_settings,
    is_test,
    reload_settings,
)


@pytest.mark.unit
class TestSettingsDefaults:
    """Test default values."""

    def test_storage_defaults(self):
        """Test storage section defaults."""
        storage = StorageSettings()

        assert storage.root == Path("./client/files")
        assert storage.file_mode == 0o644
        assert storage.dir_mode == 0o755
        assert storage.atomic_writes is True
        assert storage.strict_update is False
        assert storage.max_file_size_bytes == 100 * 1024 * 1024

    def test_server_defaults(self):
        """Test bind address and base URL."""
        settings = Settings()

        assert settings.server.bind_port == 50051
        assert settings.base_url == "http://127.0.0.1:50051"

    def test_test_environment(self):
        """Test that the suite runs in the test environment."""
        assert get_settings().environment == "test"
        assert is_test() is True


@pytest.mark.unit
class TestSettingsValidation:
    """Test field validation."""

    @pytest.mark.parametrize("value,expected", [("644", 0o644), ("0o600", 0o600), (0o640, 0o640)])
    def test_octal_modes(self, value, expected):
        """Test mode parsing from octal strings."""
        assert StorageSettings(file_mode=value).file_mode == expected

    def test_invalid_environment(self):
        """Test environment validation."""
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_invalid_log_format(self):
        """Test log format validation."""
        with pytest.raises(ValidationError):
            Settings(monitoring={"log_format": "xml"})


@pytest.mark.unit
class TestSettingsLoading:
    """Test TOML and environment merging."""

    def test_env_overrides(self, temp_dir, monkeypatch):
        """Test storage overrides from environment variables."""
        monkeypatch.setenv("STORAGE_ROOT", str(temp_dir / "blobs"))
        monkeypatch.setenv("STORAGE_FILE_MODE", "600")
        monkeypatch.setenv("STORAGE_STRICT_UPDATE", "true")
        monkeypatch.setenv("SERVER_BIND_PORT", "7000")

        settings = reload_settings()

        assert settings.storage.root == temp_dir / "blobs"
        assert settings.storage.file_mode == 0o600
        assert settings.storage.strict_update is True
        assert settings.server.bind_port == 7000

    def test_toml_file(self, temp_dir, monkeypatch):
        """Test values from the config file."""
        config = temp_dir / "filestore.toml"
        config.write_text(
            '[storage]\nmax_file_size_mb = 5\natomic_writes = false\n\n'
            '[server]\nbind_port = 6000\n'
        )
        monkeypatch.setenv("FILESTORE_CONFIG", str(config))

        settings = reload_settings()

        assert settings.storage.max_file_size_bytes == 5 * 1024 * 1024
        assert settings.storage.atomic_writes is False
        assert settings.server.bind_port == 6000

    def test_env_beats_toml(self, temp_dir, monkeypatch):
        """Test precedence of environment over file."""
        config = temp_dir / "filestore.toml"
        config.write_text('[server]\nbind_port = 6000\n')
        monkeypatch.setenv("FILESTORE_CONFIG", str(config))
        monkeypatch.setenv("SERVER_BIND_PORT", "6001")

        assert reload_settings().server.bind_port == 6001

    def test_cached(self):
        """Test that settings are cached until reloaded."""
        assert get_settings() is get_settings()
        first = get_settings()
        assert reload_settings() is not first
