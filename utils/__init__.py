"""
Utilities Package - Helper modules.

- crypto: Secure file ID and token generation
- config: TOML configuration loading
"""

from .crypto import (
    FILE_ID_ALPHABET,
    FILE_ID_LENGTH,
    generate_file_id,
    generate_token,
    is_file_id,
)

from .config import (
    load_config,
    get_config_path,
    get_section,
)

__all__ = [
    # Crypto
    'FILE_ID_ALPHABET',
    'FILE_ID_LENGTH',
    'generate_file_id',
    'generate_token',
    'is_file_id',

    # Config
    'load_config',
    'get_config_path',
    'get_section',
]
