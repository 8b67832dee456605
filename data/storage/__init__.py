"""
Storage Layer - Blob file storage

Provides file system storage operations:
- Key-addressed objects (id + extension -> one file)
- Secure ID generation and extension normalization
- Error taxonomy shared with the transport layer
"""

from .errors import FileStoreError, ObjectNotFoundError, StorageInternalError
from .local import (
    DEFAULT_EXTENSION,
    CreatedObject,
    FileStore,
    ObjectInfo,
    normalize_extension,
    with_leading_dot,
)

__all__ = [
    "DEFAULT_EXTENSION",
    "CreatedObject",
    "FileStore",
    "FileStoreError",
    "ObjectInfo",
    "ObjectNotFoundError",
    "StorageInternalError",
    "normalize_extension",
    "with_leading_dot",
]
