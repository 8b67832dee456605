"""
Unit Tests: Utilities

Tests for utils module including crypto and config.
"""

import string

import pytest

from utils import crypto
from utils.config import get_config_path, get_section, load_config


# =============================================================================
# Crypto Tests
# =============================================================================

@pytest.mark.unit
class TestCrypto:
    """Test crypto utility functions."""

    def test_generate_file_id_shape(self):
        """Test default ID length and alphabet."""
        file_id = crypto.generate_file_id()

        assert len(file_id) == 16
        assert set(file_id) <= set(string.ascii_letters + string.digits)

    @pytest.mark.slow
    def test_generate_file_id_unique(self):
        """Test that 100k IDs do not collide."""
        ids = {crypto.generate_file_id() for _ in range(100_000)}
        assert len(ids) == 100_000

    def test_generate_file_id_custom(self):
        """Test custom length and alphabet."""
        file_id = crypto.generate_file_id(8, "ab")

        assert len(file_id) == 8
        assert set(file_id) <= {"a", "b"}

    @pytest.mark.parametrize("length", [0, -1])
    def test_generate_file_id_invalid_length(self, length):
        """Test that non-positive lengths are rejected."""
        with pytest.raises(ValueError):
            crypto.generate_file_id(length)

    def test_generate_token(self):
        """Test token generation."""
        token = crypto.generate_token(32)

        assert isinstance(token, str)
        assert len(token) > 0

        # Tokens should be unique
        token2 = crypto.generate_token(32)
        assert token != token2

    def test_is_file_id(self):
        """Test recognition of generated IDs."""
        assert crypto.is_file_id(crypto.generate_file_id())
        assert crypto.is_file_id("aZ3kP0qLmN8xT2bY")
        assert not crypto.is_file_id("my")
        assert not crypto.is_file_id("aZ3kP0qLmN8xT2b-")
        assert not crypto.is_file_id("aZ3kP0qLmN8xT2bYz")


# =============================================================================
# Config Tests
# =============================================================================

@pytest.mark.unit
class TestConfig:
    """Test TOML config loading."""

    def test_missing_file_falls_back(self, temp_dir):
        """Test fallback when no config file exists."""
        config = load_config(temp_dir / "absent.toml")

        assert set(config) == {"STORAGE", "SERVER", "MONITORING"}

    def test_load_file(self, temp_dir):
        """Test loading a config file."""
        path = temp_dir / "filestore.toml"
        path.write_text('[storage]\nroot = "/srv/files"\n\n[server]\nbind_port = 6000\n')

        config = load_config(path)

        assert get_section(config, "storage") == {"root": "/srv/files"}
        assert get_section(config, "SERVER")["bind_port"] == 6000
        assert get_section(config, "monitoring") == {}

    def test_invalid_file_falls_back(self, temp_dir):
        """Test fallback when the file does not parse."""
        path = temp_dir / "broken.toml"
        path.write_text("[storage\nroot = ")

        assert load_config(path) == {"STORAGE": {}, "SERVER": {}, "MONITORING": {}}

    def test_config_path_override(self, temp_dir, monkeypatch):
        """Test FILESTORE_CONFIG env var."""
        monkeypatch.setenv("FILESTORE_CONFIG", str(temp_dir / "custom.toml"))

        assert get_config_path() == temp_dir / "custom.toml"
