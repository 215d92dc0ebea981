"""Scatter volume payload pages into the reconstructed image.

The image is a flat file addressed in 2048-byte pages. It is created when
missing and otherwise updated in place, so pages not carried by a volume keep
whatever they held before (zeros in a freshly extended file).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Union

from flopp_to_winch.logging import LoggerFactory, get_logger

from .exceptions import (
    ImageCreateError,
    ImageOpenError,
    ImageSeekError,
    ImageWriteError,
    VolumeReadError,
)
from .volume import HEADER_SIZE, PAGE_SIZE, VolumeHeader, iter_page_map


IMAGE_CREATE_MODE = 0o666


log = get_logger(source=__name__, tags=["image"])


def _reason(error: OSError) -> str:
    return error.strerror or str(error)


def open_image(output: Union[str, Path]) -> BinaryIO:
    """Open the output image for positioned writes, creating it if needed.

    Raises:
        ImageCreateError: If the image does not exist and cannot be created
        ImageOpenError: If the image cannot be opened for writing
    """
    output = str(output)
    if not os.path.exists(output):
        try:
            os.close(os.open(output, os.O_WRONLY | os.O_CREAT, IMAGE_CREATE_MODE))
        except OSError as e:
            raise ImageCreateError(output, _reason(e)) from e
        LoggerFactory.for_image(output).info("Created output image {}", output)

    try:
        fd = os.open(output, os.O_WRONLY)
    except OSError as e:
        raise ImageOpenError(output, _reason(e)) from e
    # No O_TRUNC: existing pages are merged, not replaced
    return os.fdopen(fd, "wb", buffering=0)


def write_page(image: BinaryIO, output: str, page: int, data: bytes) -> None:
    """Write one page at ``page * PAGE_SIZE``."""
    position = page * PAGE_SIZE
    try:
        if image.seek(position) != position:
            raise ImageSeekError(output, page, "position mismatch")
    except (OSError, ValueError) as e:
        raise ImageSeekError(output, page, getattr(e, "strerror", None) or str(e)) from e

    try:
        written = image.write(data)
    except OSError as e:
        raise ImageWriteError(output, page, _reason(e)) from e
    if written != len(data):
        raise ImageWriteError(
            output, page, f"short write ({written} of {len(data)} bytes)"
        )


def write_volume_pages(
    volume_file: BinaryIO,
    volume: str,
    header: VolumeHeader,
    max_pages: int,
    output: Union[str, Path],
) -> int:
    """Place every page carried by a volume at its absolute image offset.

    Payload pages are read strictly in page map order starting right after the
    header. Skip slots read nothing and write nothing.

    Args:
        volume_file: Open volume, readable from HEADER_SIZE onwards
        volume: Volume path, for messages
        header: Parsed header of ``volume_file``
        max_pages: Page budget for the decoder
        output: Path of the image to create or update

    Returns:
        Number of pages written

    Raises:
        VolumeReadError: If the volume ends in the middle of a page
        ImageCreateError, ImageOpenError, ImageSeekError, ImageWriteError:
            On output image failures
    """
    output = str(output)
    page_log = LoggerFactory.for_page(output)

    try:
        volume_file.seek(HEADER_SIZE)
    except OSError as e:
        raise VolumeReadError(volume, f"seek error: {_reason(e)}") from e

    written = 0
    with open_image(output) as image:
        for entry in iter_page_map(header.page_map, max_pages):
            for page in entry.pages:
                try:
                    data = volume_file.read(PAGE_SIZE)
                except OSError as e:
                    raise VolumeReadError(volume, _reason(e), page=page) from e
                if len(data) != PAGE_SIZE:
                    raise VolumeReadError(
                        volume,
                        f"short read ({len(data)} of {PAGE_SIZE} bytes)",
                        page=page,
                    )
                write_page(image, output, page, data)
                page_log.trace("Placed page {} at offset {}", page, page * PAGE_SIZE)
                written += 1

    log.debug("Wrote {} pages from {} to {}", written, volume, output)
    return written
