"""
File Storage Schemas

Pydantic models for the storage RPC methods. File content travels as
base64 text inside JSON bodies.

@.architecture
Incoming: api/v1/endpoints/storage.py, client/file_storage.py --- {JSON payloads with base64 file content, id, extension}
Processing: Pydantic validation and serialization, base64 decoding --- {3 jobs: data_validation, base64_codec, serialization}
Outgoing: api/v1/endpoints/storage.py, client/file_storage.py --- {CreateFileRequest, ReadFileResponse, ListFilesResponse and sibling validated models}
"""

import base64
import binascii
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def encode_content(content: bytes) -> str:
    """Bytes -> base64 text for the wire."""
    return base64.b64encode(content).decode("ascii")


def decode_content(value: str) -> bytes:
    """Base64 text -> bytes, rejecting non-alphabet characters."""
    return base64.b64decode(value, validate=True)


class _FilePayload(BaseModel):
    """Mixin for models carrying base64 file content."""
    file: str = Field(default="", description="Base64-encoded file content")

    @field_validator("file")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        try:
            decode_content(v)
        except (binascii.Error, ValueError):
            raise ValueError("file must be valid base64")
        return v

    @property
    def content(self) -> bytes:
        return decode_content(self.file)


# =============================================================================
# CreateFile
# =============================================================================

class CreateFileRequest(_FilePayload):
    """Store new content; the server assigns the ID."""
    extension: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {"file": "aGVsbG8=", "extension": "txt"}
    })


class CreateFileResponse(BaseModel):
    """Generated ID and the normalized extension."""
    id: str
    extension: str

    model_config = ConfigDict(json_schema_extra={
        "example": {"id": "aZ3kP0qLmN8xT2bY", "extension": ".txt"}
    })


# =============================================================================
# ReadFile / UpdateFile / DeleteFile
# =============================================================================

class FileKey(BaseModel):
    """Address of a stored object."""
    id: str
    extension: Optional[str] = None


class ReadFileRequest(FileKey):
    pass


class ReadFileResponse(_FilePayload):
    @classmethod
    def from_bytes(cls, content: bytes) -> "ReadFileResponse":
        return cls(file=encode_content(content))


class UpdateFileRequest(_FilePayload, FileKey):
    """Overwrite the full contents of an object."""

    model_config = ConfigDict(json_schema_extra={
        "example": {"id": "aZ3kP0qLmN8xT2bY", "file": "d29ybGQ=", "extension": ".txt"}
    })


class UpdateFileResponse(BaseModel):
    pass


class DeleteFileRequest(FileKey):
    pass


class DeleteFileResponse(BaseModel):
    pass


# =============================================================================
# ListFiles
# =============================================================================

class ListFilesRequest(BaseModel):
    pass


class FileInfo(BaseModel):
    """Directory listing entry."""
    id: str
    extension: str
    size_bytes: int
    modified_at: float


class ListFilesResponse(BaseModel):
    """All stored objects, newest first."""
    files: List[FileInfo]
    count: int
