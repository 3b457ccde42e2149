"""
Store-level errors.

Every rejection the region/box stores can produce has a fixed,
human-readable message. Admin routes show that message verbatim, either
inline in the form or in a blocking alert for deletes.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for rejected store operations."""

    message: str = "Operation failed"
    status_code: int = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class RegionNotFoundError(StoreError):
    message = "Region not found"
    status_code = 404


class BoxNotFoundError(StoreError):
    message = "HyroxBox not found"
    status_code = 404


class DuplicateRegionCodeError(StoreError):
    message = "Region code already exists"


class RegionInUseError(StoreError):
    message = (
        "Cannot delete region with associated HyroxBoxes. "
        "Please delete or reassign them first."
    )


class InvalidRegionReferenceError(StoreError):
    """A box points at a region id that does not exist."""

    message = "Region not found"


class AuthProviderError(Exception):
    """The identity provider rejected the request or is not configured."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
