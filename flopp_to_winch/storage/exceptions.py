"""Custom exceptions for volume restore operations.

This module defines a hierarchy of exceptions for reading backup volumes and
updating the reconstructed image, so callers can tell a bad volume apart from
a failing output image.

Exception Hierarchy:
    RestoreError (base)
        ├── VolumeError
        │   ├── InvalidVolumeError
        │   ├── VolumeOpenError
        │   └── VolumeReadError
        └── ImageError
            ├── ImageCreateError
            ├── ImageOpenError
            ├── ImageSeekError
            └── ImageWriteError

Usage:
    from flopp_to_winch.storage.exceptions import InvalidVolumeError

    if size < HEADER_SIZE:
        raise InvalidVolumeError(path, size)
"""

from __future__ import annotations

from typing import Optional


class RestoreError(Exception):
    """Base exception for all restore operations."""



class VolumeError(RestoreError):
    """Base exception for backup volume errors."""

    def __init__(self, message: str, volume: Optional[str] = None):
        self.volume = volume
        super().__init__(message)


class InvalidVolumeError(VolumeError):
    """Volume is too small to hold a header."""

    def __init__(self, volume: str, size: Optional[int] = None):
        self.size = size
        msg = f"Illegal volume: {volume}"
        if size is not None:
            msg += f" ({size} bytes)"
        super().__init__(msg, volume)


class VolumeOpenError(VolumeError):
    """Volume could not be stat'ed or opened."""

    def __init__(self, volume: str, reason: str):
        self.reason = reason
        super().__init__(f"Cannot open {volume}: {reason}", volume)


class VolumeReadError(VolumeError):
    """Header or payload page could not be read in full."""

    def __init__(self, volume: str, reason: str, page: Optional[int] = None):
        self.reason = reason
        self.page = page
        if page is None:
            msg = f"Error reading {volume}: {reason}"
        else:
            msg = f"Error reading input volume {volume} for page {page}: {reason}"
        super().__init__(msg, volume)


class ImageError(RestoreError):
    """Base exception for output image errors."""

    def __init__(self, message: str, image: Optional[str] = None):
        self.image = image
        super().__init__(message)


class ImageCreateError(ImageError):
    """Output image did not exist and could not be created."""

    def __init__(self, image: str, reason: str):
        self.reason = reason
        super().__init__(f"Cannot create {image}: {reason}", image)


class ImageOpenError(ImageError):
    """Output image could not be opened for update."""

    def __init__(self, image: str, reason: str):
        self.reason = reason
        super().__init__(f"Cannot open {image} for writing: {reason}", image)


class ImageSeekError(ImageError):
    """Output image could not be positioned at a page offset."""

    def __init__(self, image: str, page: int, reason: str):
        self.page = page
        self.reason = reason
        super().__init__(
            f"Error seeking to page {page} in output file {image}: {reason}", image
        )


class ImageWriteError(ImageError):
    """A page could not be written to the output image in full."""

    def __init__(self, image: str, page: int, reason: str):
        self.page = page
        self.reason = reason
        super().__init__(
            f"Error updating output file {image} page {page}: {reason}", image
        )
