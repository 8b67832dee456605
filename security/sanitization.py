"""
Input Sanitization and Validation - Security Layer

Validates object identifiers and extensions before they are joined onto the
storage root, and enforces payload size limits.

@.architecture
Incoming: data/storage/local.py, api/v1/endpoints/storage.py --- {str object id, str extension, Path storage root, int payload size}
Processing: sanitize_object_id(), sanitize_extension(), resolve_object_path(), validate_content_size() --- {3 jobs: path_validation, size_validation, validation}
Outgoing: data/storage/local.py, api/middleware/error_handler.py --- {str validated id, str validated extension, Path inside storage root, raises ValidationError}
"""

import re
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# Size Limits (configurable per deployment)
@dataclass
class SizeLimits:
    """Configurable payload size limits."""

    MAX_FILE_SIZE_BYTES: int = 100 * 1024 * 1024  # 100MB


DEFAULT_LIMITS = SizeLimits()


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


class SizeExceededError(ValidationError):
    """Raised when input exceeds size limits."""
    pass


class PathTraversalError(ValidationError):
    """Raised when path traversal attempt detected."""
    pass


class InputSanitizer:
    """
    Validates the pieces a storage path is built from.

    An object path is always ``root / (id + extension)``. Both parts come from
    the caller on Read/Update/Delete, so both are checked for separators,
    traversal sequences and control characters, and the joined path is
    verified to be a direct child of the storage root.
    """

    def __init__(self, limits: Optional[SizeLimits] = None):
        """
        Initialize sanitizer with size limits.

        Args:
            limits: Custom size limits (uses defaults if None)
        """
        self.limits = limits or DEFAULT_LIMITS

        self._path_traversal_patterns = re.compile(r"\.\.|[/\\]|%2e%2e|%2f|%5c", re.IGNORECASE)
        self._control_chars = re.compile(r"[\x00-\x1f\x7f]")

    # ==================== Object Addressing ====================

    def sanitize_object_id(self, object_id: str) -> str:
        """
        Validate an object identifier supplied by a caller.

        Server-generated IDs are alphanumeric. Anything else that is still a
        plain filename component (dots included) is accepted so that unknown
        IDs surface as NotFound rather than as a validation error. Length is
        left to the filesystem.

        Raises:
            ValidationError: If the ID is empty or contains control characters
            PathTraversalError: If the ID contains separators or traversal sequences
        """
        if not isinstance(object_id, str):
            raise ValidationError(f"Expected string id, got {type(object_id).__name__}")

        if not object_id:
            raise ValidationError("File ID is required")

        if self._path_traversal_patterns.search(object_id):
            raise PathTraversalError(f"Path traversal in file ID: {object_id!r}")

        if self._control_chars.search(object_id):
            raise ValidationError("File ID contains control characters")

        return object_id

    def sanitize_extension(self, extension: str) -> str:
        """
        Validate an already dot-prefixed extension.

        The empty string is allowed (object stored without suffix), and so is
        a bare ``.`` (stored as ``<id>.``).

        Raises:
            ValidationError: If the extension lacks its leading dot or has control characters
            PathTraversalError: If the extension contains separators or traversal sequences
        """
        if not isinstance(extension, str):
            raise ValidationError(f"Expected string extension, got {type(extension).__name__}")

        if not extension:
            return extension

        if self._path_traversal_patterns.search(extension):
            raise PathTraversalError(f"Path traversal in extension: {extension!r}")

        if self._control_chars.search(extension):
            raise ValidationError("Extension contains control characters")

        if not extension.startswith("."):
            raise ValidationError(f"Invalid extension: {extension!r}")

        return extension

    def resolve_object_path(self, root: Path, object_id: str, extension: str) -> Path:
        """
        Join ``object_id + extension`` onto ``root`` and check containment.

        Args:
            root: Resolved storage root
            object_id: Object identifier
            extension: Dot-prefixed extension (may be empty)

        Returns:
            Path of the object file, a direct child of root

        Raises:
            PathTraversalError: If the resulting path escapes the root
        """
        filename = self.sanitize_object_id(object_id) + self.sanitize_extension(extension)

        path = root / filename
        if path.parent != root or path.name != filename:
            raise PathTraversalError(f"Path {filename!r} is outside storage root")

        return path

    # ==================== Payload Validation ====================

    def validate_content_size(self, size_bytes: int, max_bytes: Optional[int] = None) -> None:
        """
        Validate payload size against limits.

        Args:
            size_bytes: Payload size in bytes
            max_bytes: Limit to apply (uses default if None)

        Raises:
            SizeExceededError: If payload exceeds size limit
        """
        max_size = max_bytes if max_bytes is not None else self.limits.MAX_FILE_SIZE_BYTES

        if size_bytes > max_size:
            raise SizeExceededError(
                f"File size {size_bytes / (1024*1024):.2f}MB exceeds "
                f"maximum {max_size / (1024*1024):.2f}MB"
            )


# Global sanitizer instance
_default_sanitizer: Optional[InputSanitizer] = None


def get_sanitizer() -> InputSanitizer:
    """Get global sanitizer instance."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = InputSanitizer()
    return _default_sanitizer


# Convenience functions for common operations
def sanitize_object_id(object_id: str) -> str:
    """Validate object ID using global sanitizer."""
    return get_sanitizer().sanitize_object_id(object_id)


def sanitize_extension(extension: str) -> str:
    """Validate extension using global sanitizer."""
    return get_sanitizer().sanitize_extension(extension)


def resolve_object_path(root: Path, object_id: str, extension: str) -> Path:
    """Resolve object path using global sanitizer."""
    return get_sanitizer().resolve_object_path(root, object_id, extension)


def validate_content_size(size_bytes: int, max_bytes: Optional[int] = None) -> None:
    """Validate payload size using global sanitizer."""
    get_sanitizer().validate_content_size(size_bytes, max_bytes)
