"""
Security Layer

Input validation for the storage service:
- Object ID and extension validation
- Path containment (no escape from the storage root)
- Payload size limits
"""

from .sanitization import (
    InputSanitizer,
    SizeLimits,
    ValidationError,
    SizeExceededError,
    PathTraversalError,
    get_sanitizer,
    sanitize_object_id,
    sanitize_extension,
    resolve_object_path,
    validate_content_size,
)

__all__ = [
    'InputSanitizer',
    'SizeLimits',
    'ValidationError',
    'SizeExceededError',
    'PathTraversalError',
    'get_sanitizer',
    'sanitize_object_id',
    'sanitize_extension',
    'resolve_object_path',
    'validate_content_size',
]
