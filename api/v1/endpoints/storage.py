"""
Storage RPC Endpoints

The file storage service methods, one POST route per RPC method under
/v1/storage. Errors raised by the store propagate to the error handler
middleware, which maps them to the RPC error body.

@.architecture
Incoming: api/v1/router.py, RPC clients (HTTP POST) --- {HTTP requests to /v1/storage/CreateFile|ReadFile|UpdateFile|DeleteFile|ListFiles, JSON bodies with base64 file content}
Processing: create_file(), read_file(), update_file(), delete_file(), list_files(), _track() --- {6 jobs: dependency_injection, base64_codec, file_crud, listing, logging, recording}
Outgoing: data/storage/local.py, monitoring/metrics.py, RPC clients (HTTP) --- {FileStore method calls, operation metrics, CreateFileResponse/ReadFileResponse/ListFilesResponse schemas}
"""

from contextlib import contextmanager
from typing import Iterator, Optional
from fastapi import APIRouter, Depends

from api.dependencies import get_file_store, setup_request_context
from api.v1.schemas.common import ERROR_RESPONSES
from api.v1.schemas.files import (
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
from data.storage import FileStore, FileStoreError
from monitoring import get_logger, setup_storage_metrics
from security.sanitization import SizeExceededError, ValidationError

logger = get_logger(__name__)
router = APIRouter(tags=["storage"], prefix="/storage")

# Metrics
metrics = setup_storage_metrics()


def _status_for(error: Exception) -> str:
    if isinstance(error, FileStoreError):
        return error.status
    if isinstance(error, SizeExceededError):
        return "RESOURCE_EXHAUSTED"
    if isinstance(error, ValidationError):
        return "INVALID_ARGUMENT"
    return "INTERNAL"


@contextmanager
def _track(operation: str) -> Iterator[None]:
    """Count, time and label one store operation."""
    metrics['inflight_operations'].inc(operation=operation)
    try:
        with metrics['operation_duration_seconds'].time(operation=operation):
            yield
    except Exception as e:
        metrics['operations_total'].inc(operation=operation, status=_status_for(e))
        raise
    else:
        metrics['operations_total'].inc(operation=operation, status="OK")
    finally:
        metrics['inflight_operations'].dec(operation=operation)


# =============================================================================
# CRUD Methods
# =============================================================================

@router.post(
    "/CreateFile",
    response_model=CreateFileResponse,
    responses=ERROR_RESPONSES,
    summary="Create file",
    description="Store content under a new server-generated ID"
)
async def create_file(
    request: CreateFileRequest,
    store: FileStore = Depends(get_file_store),
    _context: dict = Depends(setup_request_context)
) -> CreateFileResponse:
    content = request.content

    with _track("create"):
        created = await store.create(content, request.extension)

    metrics['bytes_total'].inc(len(content), direction="in")
    logger.info(
        "File created",
        file_id=created.id,
        extension=created.extension,
        size_bytes=len(content)
    )
    return CreateFileResponse(id=created.id, extension=created.extension)


@router.post(
    "/ReadFile",
    response_model=ReadFileResponse,
    responses=ERROR_RESPONSES,
    summary="Read file",
    description="Return the full contents of an object"
)
async def read_file(
    request: ReadFileRequest,
    store: FileStore = Depends(get_file_store),
    _context: dict = Depends(setup_request_context)
) -> ReadFileResponse:
    """
    Read an object.

    The extension must match the one returned by CreateFile; only a missing
    leading dot is added.
    """
    with _track("read"):
        content = await store.read(request.id, request.extension)

    metrics['bytes_total'].inc(len(content), direction="out")
    logger.debug("File read", file_id=request.id, size_bytes=len(content))
    return ReadFileResponse.from_bytes(content)


@router.post(
    "/UpdateFile",
    response_model=UpdateFileResponse,
    responses=ERROR_RESPONSES,
    summary="Update file",
    description="Replace the full contents of an object"
)
async def update_file(
    request: UpdateFileRequest,
    store: FileStore = Depends(get_file_store),
    _context: dict = Depends(setup_request_context)
) -> UpdateFileResponse:
    content = request.content

    with _track("update"):
        await store.update(request.id, request.extension, content)

    metrics['bytes_total'].inc(len(content), direction="in")
    logger.info("File updated", file_id=request.id, size_bytes=len(content))
    return UpdateFileResponse()


@router.post(
    "/DeleteFile",
    response_model=DeleteFileResponse,
    responses=ERROR_RESPONSES,
    summary="Delete file",
    description="Remove an object; deleting a missing object is an internal error"
)
async def delete_file(
    request: DeleteFileRequest,
    store: FileStore = Depends(get_file_store),
    _context: dict = Depends(setup_request_context)
) -> DeleteFileResponse:
    with _track("delete"):
        await store.delete(request.id, request.extension)

    logger.info("File deleted", file_id=request.id)
    return DeleteFileResponse()


# =============================================================================
# Listing
# =============================================================================

@router.post(
    "/ListFiles",
    response_model=ListFilesResponse,
    responses={500: ERROR_RESPONSES[500]},
    summary="List files",
    description="Authoritative listing of stored objects, newest first"
)
async def list_files(
    request: Optional[ListFilesRequest] = None,
    store: FileStore = Depends(get_file_store),
    _context: dict = Depends(setup_request_context)
) -> ListFilesResponse:
    with _track("list"):
        objects = await store.list()

    files = [
        FileInfo(
            id=obj.id,
            extension=obj.extension,
            size_bytes=obj.size_bytes,
            modified_at=obj.modified_at
        )
        for obj in objects
    ]
    return ListFilesResponse(files=files, count=len(files))
