"""
Simple config loader for the storage service.
Reads the optional TOML overrides file.

@.architecture
Incoming: config/filestore.toml, FILESTORE_CONFIG env var, config/settings.py --- {TOML file, load_config calls}
Processing: load_config(), get_config_path(), get_fallback_config(), get_section() --- {3 jobs: config_loading, fallback_generation, section_extraction}
Outgoing: config/settings.py --- {Dict[str, Any] config data}
"""

import os
import logging
import toml
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "filestore.toml"


def get_config_path() -> Path:
    """Location of the TOML file, FILESTORE_CONFIG wins over the bundled default."""
    override = os.getenv("FILESTORE_CONFIG")
    if override:
        return Path(override)
    return DEFAULT_CONFIG_FILE


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the TOML file, or the fallback when absent."""
    config_file = Path(path) if path is not None else get_config_path()
    if not config_file.exists():
        logger.debug(f"No config file at {config_file}, using defaults")
        return get_fallback_config()
    try:
        with open(config_file, 'r') as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Failed to load config file {config_file}: {e}")
        return get_fallback_config()


def get_fallback_config() -> Dict[str, Any]:
    """Fallback configuration if TOML file can't be loaded."""
    return {
        "STORAGE": {},
        "SERVER": {},
        "MONITORING": {},
    }


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Get a section from loaded config, matched case-insensitively."""
    for key, value in config.items():
        if key.lower() == name.lower() and isinstance(value, dict):
            return value
    return {}
