"""
Storage Errors - File store failure taxonomy

@.architecture
Incoming: data/storage/local.py, client/file_storage.py --- {str message, OSError cause, str file id/extension}
Processing: FileStoreError.__init__(), to_dict() --- {2 jobs: error_classification, serialization}
Outgoing: api/middleware/error_handler.py, client/file_storage.py, client/cli.py --- {FileStoreError subclasses carrying status_code and status name}

Every error carries the HTTP ``status_code`` and RPC ``status`` name the
transport layer reports for it.
"""

from typing import Any, Dict, Optional


class FileStoreError(Exception):
    """Base class for file store failures."""

    status_code: int = 500
    status: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        file_id: Optional[str] = None,
        extension: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.file_id = file_id
        self.extension = extension

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.status_code,
            "status": self.status,
            "message": self.message,
            "type": type(self).__name__,
        }


class ObjectNotFoundError(FileStoreError):
    """No file exists at the path resolved from id + extension."""

    status_code = 404
    status = "NOT_FOUND"


class StorageInternalError(FileStoreError):
    """Any other filesystem failure, including Delete of a missing file."""

    status_code = 500
    status = "INTERNAL"
