"""
Local File Store - Key-addressed blob storage on the local filesystem

@.architecture
Incoming: api/v1/endpoints/storage.py, app.py, Local filesystem (root) --- {create/read/update/delete/list requests, bytes content, str file id, str extension}
Processing: create(), read(), update(), delete(), list(), check_health(), normalize_extension(), _resolve(), _write() --- {7 jobs: id_generation, extension_normalization, path_validation, file_crud, atomic_replace, listing, health_check}
Outgoing: Local filesystem (aiofiles open/replace/remove), api/v1/endpoints/storage.py --- {bytes file content, CreatedObject, List[ObjectInfo], raises ObjectNotFoundError/StorageInternalError}

One file per object in a single flat directory. The filename is
``<id><extension>``; there is no index or manifest beyond the directory
itself.

- Create generates the ID and normalizes the extension (empty -> ``.txt``).
- Read/Update/Delete take the extension as given, only adding a missing
  leading dot. An absent extension means no suffix.
- Writes go to a hidden temp file and are renamed over the target unless
  ``atomic_writes`` is disabled.
"""

import asyncio
import contextlib
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

import aiofiles
import aiofiles.os

from security.sanitization import InputSanitizer, get_sanitizer
from utils.crypto import generate_file_id, generate_token, is_file_id

from .errors import ObjectNotFoundError, StorageInternalError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".txt"

# retries on the (practically impossible) event of an ID collision
MAX_ID_ATTEMPTS = 5


@dataclass(frozen=True)
class CreatedObject:
    """Result of a successful create."""
    id: str
    extension: str

    @property
    def filename(self) -> str:
        return self.id + self.extension


@dataclass(frozen=True)
class ObjectInfo:
    """Directory listing entry."""
    id: str
    extension: str
    size_bytes: int
    modified_at: float


def with_leading_dot(extension: Optional[str]) -> str:
    """Prepend ``.`` to a non-empty extension that lacks one."""
    if not extension:
        return ""
    if not extension.startswith("."):
        return "." + extension
    return extension


def normalize_extension(extension: Optional[str]) -> str:
    """
    Canonical extension used on create.

    Examples:
        >>> normalize_extension("")
        '.txt'
        >>> normalize_extension("pdf")
        '.pdf'
        >>> normalize_extension(".png")
        '.png'
    """
    return with_leading_dot(extension) or DEFAULT_EXTENSION


def split_filename(filename: str) -> tuple:
    """
    Split a stored filename back into ``(id, extension)``.

    Generated IDs never contain a dot, so for them everything after the
    first dot is the extension (``.tar.gz`` stays whole). Caller-chosen IDs
    may contain dots; those names are split at the last dot.

    Examples:
        >>> split_filename("aZ3kP0qLmN8xT2bY.tar.gz")
        ('aZ3kP0qLmN8xT2bY', '.tar.gz')
        >>> split_filename("my.file.txt")
        ('my.file', '.txt')
    """
    file_id, dot, rest = filename.partition(".")
    if dot and not is_file_id(file_id):
        file_id, dot, rest = filename.rpartition(".")
    return file_id, dot + rest


class FileStore:
    """
    Local file store.

    Features:
    - Secure random 16-character IDs
    - Path containment checks before every filesystem call
    - Atomic whole-file replace (write temp, then rename)
    - Authoritative listing from the directory contents
    """

    def __init__(
        self,
        root: Union[str, Path] = "./client/files",
        file_mode: int = 0o644,
        dir_mode: int = 0o755,
        atomic_writes: bool = True,
        strict_update: bool = False,
        max_file_size_bytes: Optional[int] = None,
        id_factory: Callable[[], str] = generate_file_id,
        sanitizer: Optional[InputSanitizer] = None,
        create_root: bool = True,
    ):
        """
        Initialize local file store.

        Args:
            root: Storage directory
            file_mode: Permission bits for written files
            dir_mode: Permission bits for the storage directory when created
            atomic_writes: Write to a temp file and rename over the target
            strict_update: Update of a missing object raises ObjectNotFoundError
            max_file_size_bytes: Payload limit (sanitizer default if None)
            id_factory: ID generator
            sanitizer: Input sanitizer (global one if None)
            create_root: Create the storage directory now if absent
        """
        self.root = Path(root).resolve()
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.atomic_writes = atomic_writes
        self.strict_update = strict_update
        self.max_file_size_bytes = max_file_size_bytes
        self._id_factory = id_factory
        self._sanitizer = sanitizer or get_sanitizer()

        if create_root:
            self.ensure_root()

    @classmethod
    def from_settings(cls, storage_settings, **kwargs) -> "FileStore":
        """Build a store from ``config.settings.StorageSettings``."""
        return cls(
            root=storage_settings.root,
            file_mode=storage_settings.file_mode,
            dir_mode=storage_settings.dir_mode,
            atomic_writes=storage_settings.atomic_writes,
            strict_update=storage_settings.strict_update,
            max_file_size_bytes=storage_settings.max_file_size_bytes,
            **kwargs,
        )

    def ensure_root(self) -> None:
        """Create the storage directory if it doesn't exist."""
        try:
            self.root.mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageInternalError(f"Failed to create storage directory {self.root}: {e}") from e
        logger.debug(f"Storage directory ensured at {self.root}")

    def _resolve(self, file_id: str, extension: str) -> Path:
        """
        Map id + extension to a path directly under the root.

        Raises:
            PathTraversalError: If the name would escape the storage directory
            ValidationError: If id or extension is malformed
        """
        return self._sanitizer.resolve_object_path(self.root, file_id, extension)

    def _check_size(self, content: bytes) -> None:
        self._sanitizer.validate_content_size(len(content), self.max_file_size_bytes)

    # =========================================================================
    # FILE OPERATIONS
    # =========================================================================

    async def create(self, content: bytes, extension: Optional[str] = None) -> CreatedObject:
        """
        Store new content under a freshly generated ID.

        Args:
            content: File bytes
            extension: Optional extension, normalized before use

        Returns:
            CreatedObject with the new ID and the normalized extension

        Raises:
            SizeExceededError: If content is over the size limit
            StorageInternalError: If the write fails
        """
        self._check_size(content)
        ext = normalize_extension(extension)

        for _ in range(MAX_ID_ATTEMPTS):
            file_id = self._id_factory()
            path = self._resolve(file_id, ext)
            if not await aiofiles.os.path.exists(path):
                break
            logger.warning(f"Generated file ID collided with existing file: {path.name}")
        else:
            raise StorageInternalError("Failed to allocate a unique file ID")

        await self._write(path, content, action="create")

        logger.info(f"Created file: {path.name} ({len(content)} bytes)")
        return CreatedObject(id=file_id, extension=ext)

    async def read(self, file_id: str, extension: Optional[str] = None) -> bytes:
        """
        Read the full contents of an object.

        Raises:
            ObjectNotFoundError: If no file exists at the resolved path
            StorageInternalError: For any other read failure
        """
        ext = with_leading_dot(extension)
        path = self._resolve(file_id, ext)

        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(
                f"File not found: {path.name}", file_id=file_id, extension=ext
            ) from e
        except OSError as e:
            logger.error(f"Failed to read file {path.name}: {e}")
            raise StorageInternalError(
                f"Failed to read file: {e}", file_id=file_id, extension=ext
            ) from e

        logger.debug(f"Read file: {path.name} ({len(content)} bytes)")
        return content

    async def update(self, file_id: str, extension: Optional[str], content: bytes) -> None:
        """
        Replace the full contents of an object.

        A missing object is created unless ``strict_update`` is set.

        Raises:
            ObjectNotFoundError: If strict_update is set and the file is missing
            SizeExceededError: If content is over the size limit
            StorageInternalError: If the write fails
        """
        self._check_size(content)
        ext = with_leading_dot(extension)
        path = self._resolve(file_id, ext)

        if self.strict_update and not await aiofiles.os.path.isfile(path):
            raise ObjectNotFoundError(f"File not found: {path.name}", file_id=file_id, extension=ext)

        await self._write(path, content, action="update")
        logger.info(f"Updated file: {path.name} ({len(content)} bytes)")

    async def delete(self, file_id: str, extension: Optional[str] = None) -> None:
        """
        Remove an object.

        Raises:
            StorageInternalError: If removal fails, including when the file is missing
        """
        ext = with_leading_dot(extension)
        path = self._resolve(file_id, ext)

        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning(f"Failed to delete file {path.name}: {e}")
            raise StorageInternalError(
                f"Failed to delete file: {e}", file_id=file_id, extension=ext
            ) from e

        logger.info(f"Deleted file: {path.name}")

    async def list(self) -> List[ObjectInfo]:
        """
        List stored objects, newest first.

        Hidden files (in-flight temp files included) are skipped.

        Raises:
            StorageInternalError: If the directory cannot be read
        """
        try:
            names = await aiofiles.os.listdir(self.root)
        except OSError as e:
            raise StorageInternalError(f"Failed to list files: {e}") from e

        objects = []
        for name in names:
            if name.startswith("."):
                continue
            try:
                st = await aiofiles.os.stat(self.root / name)
            except FileNotFoundError:
                # removed between listdir and stat
                continue
            except OSError as e:
                raise StorageInternalError(f"Failed to stat {name}: {e}") from e
            if not stat.S_ISREG(st.st_mode):
                continue

            file_id, ext = split_filename(name)
            objects.append(ObjectInfo(
                id=file_id,
                extension=ext,
                size_bytes=st.st_size,
                modified_at=st.st_mtime,
            ))

        objects.sort(key=lambda o: (-o.modified_at, o.id))
        return objects

    # =========================================================================
    # WRITE PATH
    # =========================================================================

    async def _write(self, path: Path, content: bytes, action: str) -> None:
        """Write content to path, atomically when enabled."""
        if not self.atomic_writes:
            try:
                async with aiofiles.open(path, "wb") as f:
                    await f.write(content)
                await asyncio.to_thread(os.chmod, path, self.file_mode)
            except OSError as e:
                logger.error(f"Failed to {action} file {path.name}: {e}")
                raise StorageInternalError(f"Failed to write file: {e}") from e
            return

        tmp_path = path.with_name(f".{path.name}.{generate_token(6)}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(content)
            await asyncio.to_thread(os.chmod, tmp_path, self.file_mode)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            logger.error(f"Failed to {action} file {path.name}: {e}")
            raise StorageInternalError(f"Failed to write file: {e}") from e

    # =========================================================================
    # HEALTH
    # =========================================================================

    async def check_health(self) -> dict:
        """
        Check that the storage directory exists and is writable.

        Returns:
            Dict with healthy flag, message and root path
        """
        marker = self.root / f".health-{generate_token(6)}"
        try:
            async with aiofiles.open(marker, "wb") as f:
                await f.write(b"ok")
            await aiofiles.os.remove(marker)
        except OSError as e:
            return {
                "healthy": False,
                "message": f"Storage directory not writable: {e}",
                "root": str(self.root),
            }

        return {
            "healthy": True,
            "message": "Storage directory writable",
            "root": str(self.root),
        }
