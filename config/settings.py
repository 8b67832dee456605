"""
Settings Management

Pydantic-based settings schema with environment variable support.
Integrates with the optional TOML config and provides type-safe access.

@.architecture
Incoming: utils/config.py, Environment variables, config/filestore.toml, client/file_storage.py --- {Dict from load_toml_config, str from os.getenv, TOML config dict, get_settings calls}
Processing: get_settings(), reload_settings(), Settings.__init__(), field_validator() --- {4 jobs: configuration_loading, environment_variable_merging, schema_validation, caching}
Outgoing: app.py, main.py, client/file_storage.py --- {Settings Pydantic model with typed config sections}
"""

import os
from pathlib import Path
from typing import List, Dict, Any, Union
from pydantic import BaseModel, Field, field_validator
from functools import lru_cache

from utils.config import load_config as load_toml_config, get_section


# =============================================================================
# Settings Schemas
# =============================================================================

class StorageSettings(BaseModel):
    """File storage settings."""
    root: Path = Field(default_factory=lambda: Path("./client/files"))
    file_mode: int = 0o644
    dir_mode: int = 0o755
    atomic_writes: bool = True
    strict_update: bool = False
    max_file_size_mb: int = 100

    @field_validator('file_mode', 'dir_mode', mode='before')
    @classmethod
    def parse_mode(cls, v: Union[int, str]) -> int:
        """Accept octal strings such as "644" or "0o644"."""
        if isinstance(v, str):
            return int(v, 8)
        return v

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class ServerSettings(BaseModel):
    """Network binding configuration."""
    bind_host: str = "127.0.0.1"
    bind_port: int = 50051
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://127.0.0.1",
        ]
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class MonitoringSettings(BaseModel):
    """Monitoring and logging configuration."""
    log_level: str = "INFO"
    log_format: str = "json"  # json|text
    metrics_enabled: bool = True

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ('json', 'text'):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


class Settings(BaseModel):
    """
    Main application settings.

    Loads configuration from:
    1. TOML config file (config/filestore.toml or FILESTORE_CONFIG)
    2. Environment variables
    3. Defaults defined in schemas

    Priority: Environment variables > TOML config > Defaults
    """

    app_name: str = "FileStore"
    app_version: str = "1.0.0"
    environment: str = "development"  # development|production|test

    storage: StorageSettings = Field(default_factory=StorageSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @property
    def base_url(self) -> str:
        """Service URL built from the bind settings."""
        return f"http://{self.server.bind_host}:{self.server.bind_port}"

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ['development', 'production', 'test']
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v


# =============================================================================
# Settings Loader
# =============================================================================

# env var -> (section, field)
ENV_OVERRIDES = {
    "STORAGE_ROOT": ("storage", "root"),
    "STORAGE_FILE_MODE": ("storage", "file_mode"),
    "STORAGE_DIR_MODE": ("storage", "dir_mode"),
    "STORAGE_ATOMIC_WRITES": ("storage", "atomic_writes"),
    "STORAGE_STRICT_UPDATE": ("storage", "strict_update"),
    "STORAGE_MAX_FILE_SIZE_MB": ("storage", "max_file_size_mb"),
    "SERVER_BIND_HOST": ("server", "bind_host"),
    "SERVER_BIND_PORT": ("server", "bind_port"),
    "MONITORING_LOG_LEVEL": ("monitoring", "log_level"),
    "MONITORING_LOG_FORMAT": ("monitoring", "log_format"),
    "MONITORING_METRICS_ENABLED": ("monitoring", "metrics_enabled"),
}


@lru_cache()
def get_settings() -> Settings:
    """
    Load and return application settings (cached).

    Merges configuration from:
    1. TOML config file (via utils.config)
    2. Environment variables
    3. Default values

    Returns:
        Settings: Complete application settings
    """
    # Load TOML config
    toml_config = load_toml_config()

    settings_dict: Dict[str, Any] = {
        "storage": dict(get_section(toml_config, "storage")),
        "server": dict(get_section(toml_config, "server")),
        "monitoring": dict(get_section(toml_config, "monitoring")),
    }

    app_config = get_section(toml_config, "app")
    for key in ("app_name", "app_version", "environment"):
        if key in app_config:
            settings_dict[key] = app_config[key]

    # Override with environment variables if present
    if environment := os.getenv("FILESTORE_ENVIRONMENT"):
        settings_dict["environment"] = environment

    for env_name, (section, field) in ENV_OVERRIDES.items():
        if (value := os.getenv(env_name)) is not None:
            settings_dict[section][field] = value

    return Settings(**settings_dict)


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Use this when settings need to be refreshed (e.g., after config file changes).

    Returns:
        Settings: Reloaded application settings
    """
    get_settings.cache_clear()
    return get_settings()


# =============================================================================
# Environment-specific Helpers
# =============================================================================

def is_development() -> bool:
    """Check if running in development environment."""
    return get_settings().environment == "development"


def is_test() -> bool:
    """Check if running in test environment."""
    return get_settings().environment == "test"
