"""
Storage Client

- file_storage: async RPC client for the /v1/storage methods
- cli: command line shell built on the client
"""

from .file_storage import (
    FileStorageClient,
    FileStorageClientConfig,
    FileStorageClientError,
)

__all__ = [
    'FileStorageClient',
    'FileStorageClientConfig',
    'FileStorageClientError',
]
