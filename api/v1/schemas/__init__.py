"""
API V1 Schemas

Pydantic models for request/response validation.
"""

from .common import (
    ErrorDetail,
    ErrorResponse,
    ERROR_RESPONSES,
    HealthStatus,
    ServiceInfoResponse,
)

from .health import (
    HealthCheckResponse,
    ComponentHealth,
    SimpleHealthResponse,
)

from .files import (
    encode_content,
    decode_content,
    CreateFileRequest,
    CreateFileResponse,
    ReadFileRequest,
    ReadFileResponse,
    UpdateFileRequest,
    UpdateFileResponse,
    DeleteFileRequest,
    DeleteFileResponse,
    ListFilesRequest,
    ListFilesResponse,
    FileInfo,
)

__all__ = [
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "ERROR_RESPONSES",
    "HealthStatus",
    "ServiceInfoResponse",

    # Health
    "HealthCheckResponse",
    "ComponentHealth",
    "SimpleHealthResponse",

    # Files
    "encode_content",
    "decode_content",
    "CreateFileRequest",
    "CreateFileResponse",
    "ReadFileRequest",
    "ReadFileResponse",
    "UpdateFileRequest",
    "UpdateFileResponse",
    "DeleteFileRequest",
    "DeleteFileResponse",
    "ListFilesRequest",
    "ListFilesResponse",
    "FileInfo",
]
