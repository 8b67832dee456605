"""
Cryptography Utilities - Secure identifier generation.

Object IDs are drawn from the operating system CSPRNG through ``secrets`` so
they are unpredictable and never derived from wall-clock time.

@.architecture
Incoming: data/storage/local.py, api/dependencies.py --- {int length, str alphabet}
Processing: generate_file_id(), generate_token(), is_file_id() --- {3 jobs: id_generation, token_generation, id_recognition}
Outgoing: data/storage/local.py, api/dependencies.py --- {str 16-char alphanumeric file ID, str URL-safe token}
"""

import secrets
import string

__all__ = [
    'FILE_ID_ALPHABET',
    'FILE_ID_LENGTH',
    'generate_file_id',
    'generate_token',
    'is_file_id',
]


FILE_ID_ALPHABET = string.ascii_letters + string.digits
FILE_ID_LENGTH = 16


# =============================================================================
# Convenience Functions
# =============================================================================

def generate_file_id(length: int = FILE_ID_LENGTH, alphabet: str = FILE_ID_ALPHABET) -> str:
    """
    Generate a random object identifier.

    Each character is chosen uniformly from ``alphabet`` (62 symbols by
    default, ~95 bits for 16 characters).

    Args:
        length: Number of characters
        alphabet: Symbols to draw from

    Returns:
        Random identifier string

    Example:
        >>> file_id = generate_file_id()
        >>> len(file_id)
        16
    """
    if length <= 0:
        raise ValueError("length must be positive")
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def generate_token(length: int = 16) -> str:
    """
    Generate a URL-safe random token.

    Args:
        length: Token length in bytes

    Returns:
        URL-safe base64-encoded token
    """
    return secrets.token_urlsafe(length)


def is_file_id(value: str) -> bool:
    """True if ``value`` has the shape of an ID from ``generate_file_id()``."""
    return len(value) == FILE_ID_LENGTH and all(c in FILE_ID_ALPHABET for c in value)
