"""Volume header parsing.

Header layout (first 16384 bytes of every volume):
- 0..1: volume index (big-endian u16)
- 2..17: directory name (7-bit, apostrophe-terminated)
- 18..67: label (raw bytes)
- 68..69: volume total (big-endian u16)
- 76..: page map entries, 36 bytes each
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Callable, Union

from flopp_to_winch.storage.exceptions import InvalidVolumeError, VolumeReadError

from .codec import extract_name, extract_raw, read_u16_be
from .models import VolumeHeader


HEADER_SIZE = 16384
PAGE_MAP_OFFSET = 76
PAGE_SIZE = 2048


@dataclass(frozen=True)
class HeaderField:
    offset: int
    width: int
    decode: Callable[[bytes, int, int], Union[int, str, bytes]]

    def read(self, buf: bytes):
        return self.decode(buf, self.offset, self.width)


def _u16(buf: bytes, offset: int, _width: int) -> int:
    return read_u16_be(buf, offset)


HEADER_FIELDS: dict[str, HeaderField] = {
    "volume_index": HeaderField(0, 2, _u16),
    "directory_name": HeaderField(2, 16, extract_name),
    "label": HeaderField(18, 50, extract_raw),
    "volume_total": HeaderField(68, 2, _u16),
}


def parse_volume_header(data: bytes, volume: str = "<buffer>") -> VolumeHeader:
    """Build a VolumeHeader from the first HEADER_SIZE bytes of ``data``.

    Raises:
        InvalidVolumeError: If fewer than HEADER_SIZE bytes are supplied
    """
    if len(data) < HEADER_SIZE:
        raise InvalidVolumeError(volume, len(data))
    buf = bytes(data[:HEADER_SIZE])
    values = {name: field.read(buf) for name, field in HEADER_FIELDS.items()}
    return VolumeHeader(page_map=buf[PAGE_MAP_OFFSET:], **values)


def read_volume_header(volume_file: BinaryIO, volume: str) -> VolumeHeader:
    """Read and parse the header from an open volume positioned at 0."""
    try:
        data = volume_file.read(HEADER_SIZE)
    except OSError as e:
        raise VolumeReadError(volume, e.strerror or str(e)) from e
    if len(data) != HEADER_SIZE:
        raise VolumeReadError(
            volume, f"short header ({len(data)} of {HEADER_SIZE} bytes)"
        )
    return parse_volume_header(data, volume)
