"""
File Storage Client - RPC client for the storage service.

Async httpx client for the /v1/storage methods with connection retry,
timeouts and mapping of RPC error bodies back to storage exceptions.

@.architecture
Incoming: client/cli.py, Callers --- {bytes content, str file id, str extension, FileStorageClientConfig}
Processing: create_file(), read_file(), update_file(), delete_file(), list_files(), _call(), _raise_for_error(), _get_or_create_client(), close() --- {6 jobs: http_client_management, request_retry, base64_codec, error_mapping, initialization, cleanup}
Outgoing: storage service (HTTP POST /v1/storage/*), Callers --- {CreatedObject, bytes, List[ObjectInfo], raises ObjectNotFoundError/StorageInternalError/FileStorageClientError}
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from api.v1.schemas.files import decode_content, encode_content
from data.storage import CreatedObject, ObjectInfo, ObjectNotFoundError, StorageInternalError

logger = logging.getLogger(__name__)

# Failures where the request never reached the server; safe to retry for every method.
RETRYABLE_ERRORS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
)


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class FileStorageClientConfig:
    """Client configuration."""

    base_url: str = "http://127.0.0.1:50051"
    api_prefix: str = "/v1/storage"

    # Timeouts
    connect_timeout: float = 5.0
    read_timeout: float = 60.0
    write_timeout: float = 60.0
    pool_timeout: float = 5.0

    # Retry configuration
    max_retries: int = 3
    retry_min_wait: float = 0.5        # Exponential backoff min
    retry_max_wait: float = 5.0        # Exponential backoff max

    @classmethod
    def from_settings(cls) -> 'FileStorageClientConfig':
        """Point at the locally configured server."""
        from config.settings import get_settings
        return cls(base_url=get_settings().base_url)


class FileStorageClientError(Exception):
    """Non-2xx response that maps to no storage error, or an unreachable server."""

    def __init__(self, message: str, status_code: Optional[int] = None, status: str = "UNKNOWN"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = status


# =============================================================================
# Client
# =============================================================================

class FileStorageClient:
    """
    Storage service client.

    Usage:
        async with FileStorageClient() as client:
            created = await client.create_file(b"hello", "txt")
            content = await client.read_file(created.id, created.extension)
    """

    def __init__(
        self,
        config: Optional[FileStorageClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize client.

        Args:
            config: Client configuration (uses defaults if None)
            transport: Custom httpx transport (e.g. ASGITransport in tests)
        """
        self.config = config or FileStorageClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> 'FileStorageClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_or_create_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None or self._client.is_closed:
                timeout = httpx.Timeout(
                    connect=self.config.connect_timeout,
                    read=self.config.read_timeout,
                    write=self.config.write_timeout,
                    pool=self.config.pool_timeout,
                )
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=timeout,
                    transport=self._transport,
                )
                logger.debug(f"Created storage client for {self.config.base_url}")

            return self._client

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        async with self._client_lock:
            if self._client and not self._client.is_closed:
                await self._client.aclose()
                logger.debug("Closed storage client")
            self._client = None

    # =========================================================================
    # Transport
    # =========================================================================

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST one RPC method and return the decoded JSON body.

        Raises:
            ObjectNotFoundError: On 404
            StorageInternalError: On 500
            FileStorageClientError: On other errors or when the server is unreachable
        """
        client = await self._get_or_create_client()
        url = f"{self.config.api_prefix}/{method}"

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(min=self.config.retry_min_wait, max=self.config.retry_max_wait),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await client.post(url, json=payload)
        except RETRYABLE_ERRORS as e:
            raise FileStorageClientError(
                f"Storage service unreachable at {self.config.base_url}: {e}",
                status="UNAVAILABLE"
            ) from e
        except RetryError as e:
            raise FileStorageClientError(f"Storage request failed: {e}", status="UNAVAILABLE") from e
        except httpx.HTTPError as e:
            raise FileStorageClientError(f"Storage request failed: {e}", status="UNAVAILABLE") from e

        if response.is_success:
            return response.json()

        self._raise_for_error(response)

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        """Map an RPC error body back to an exception."""
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        if not isinstance(error, dict):
            error = {}

        message = error.get("message") or response.text or response.reason_phrase
        status = error.get("status", "UNKNOWN")

        if response.status_code == 404:
            raise ObjectNotFoundError(message)
        if response.status_code == 500:
            raise StorageInternalError(message)
        raise FileStorageClientError(message, status_code=response.status_code, status=status)

    # =========================================================================
    # RPC Methods
    # =========================================================================

    async def create_file(self, content: bytes, extension: Optional[str] = None) -> CreatedObject:
        """Store content; returns the server-assigned ID and normalized extension."""
        body = await self._call("CreateFile", {"file": encode_content(content), "extension": extension})
        return CreatedObject(id=body["id"], extension=body["extension"])

    async def read_file(self, file_id: str, extension: Optional[str] = None) -> bytes:
        body = await self._call("ReadFile", {"id": file_id, "extension": extension})
        return decode_content(body.get("file", ""))

    async def update_file(self, file_id: str, content: bytes, extension: Optional[str] = None) -> None:
        await self._call("UpdateFile", {
            "id": file_id,
            "file": encode_content(content),
            "extension": extension,
        })

    async def delete_file(self, file_id: str, extension: Optional[str] = None) -> None:
        await self._call("DeleteFile", {"id": file_id, "extension": extension})

    async def list_files(self) -> List[ObjectInfo]:
        """Server-side listing, newest first."""
        body = await self._call("ListFiles", {})
        return [
            ObjectInfo(
                id=item["id"],
                extension=item["extension"],
                size_bytes=item["size_bytes"],
                modified_at=item["modified_at"],
            )
            for item in body.get("files", [])
        ]
