"""
Pytest configuration and shared fixtures for flopp-to-winch tests.

This module provides builders for synthetic backup volumes and keeps settings
and log files out of the user's home directory.
"""

import struct
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from flopp_to_winch.config import settings
from flopp_to_winch.logging import logger


HEADER_SIZE = 16384
PAGE_SIZE = 2048
SKIP = -1

Entry = Tuple[Sequence[int], int]


def page_bytes(tag: int) -> bytes:
    """A recognisable 2048-byte page filled with a repeated 4-byte tag."""
    return struct.pack(">I", tag & 0xFFFFFFFF) * (PAGE_SIZE // 4)


def build_header(
    entries: Sequence[Entry] = (),
    *,
    volume_index: int = 1,
    volume_total: int = 1,
    directory_name: bytes = b"SYS'",
    label: bytes = b"TEST BACKUP",
) -> bytes:
    """Pack a 16384-byte volume header.

    Bytes after the last entry stay zero, so the next entry reads as a
    terminating count of 0.
    """
    buf = bytearray(HEADER_SIZE)
    struct.pack_into(">H", buf, 0, volume_index)
    buf[2 : 2 + len(directory_name)] = directory_name[:16]
    buf[18 : 18 + len(label)] = label[:50]
    struct.pack_into(">H", buf, 68, volume_total)
    offset = 76
    for slots, count in entries:
        struct.pack_into(">8iI", buf, offset, *slots, count)
        offset += 36
    return bytes(buf)


# ==============================================================================
# Isolation Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point settings and log files at the test's temp dir."""
    monkeypatch.setattr(
        "flopp_to_winch.config.settings.SETTINGS_PATH",
        tmp_path / "config" / "settings.json",
    )
    monkeypatch.setattr("flopp_to_winch.logging.DEFAULT_LOG_DIR", tmp_path / "logs")
    settings.settings_store.values = dict(settings.DEFAULT_SETTINGS)
    yield
    logger.remove()
    logger.disable("flopp_to_winch")


# ==============================================================================
# Volume Fixtures
# ==============================================================================


@pytest.fixture
def volume_dir(tmp_path) -> Path:
    path = tmp_path / "volumes"
    path.mkdir()
    return path


@pytest.fixture
def make_volume(volume_dir) -> Callable[..., Path]:
    """
    Fixture providing a factory for volume files.

    The factory writes a header followed by one payload page per non-skip
    slot. Unless ``pages`` is given, the page for destination ``n`` is
    ``page_bytes(n)``. By default the file is padded with zero pages up to
    the nominal capacity of the page map (8 pages per entry), the way a full
    floppy image is sized.

    Returns:
        Callable returning the path of the written volume.
    """

    def _make(
        name: str,
        entries: Sequence[Entry] = (),
        *,
        pages: Optional[List[bytes]] = None,
        pad: bool = True,
        **header_fields,
    ) -> Path:
        header = build_header(entries, **header_fields)
        if pages is None:
            pages = []
            for slots, count in entries:
                if count == 0:
                    break
                pages.extend(page_bytes(slot) for slot in slots if slot != SKIP)
        payload = b"".join(pages)
        if pad:
            capacity = 8 * sum(1 for _slots, count in entries if count)
            missing = capacity - len(pages)
            if missing > 0:
                payload += b"\x00" * (missing * PAGE_SIZE)
        path = volume_dir / name
        path.write_bytes(header + payload)
        return path

    return _make


@pytest.fixture
def single_page_volume(make_volume) -> Path:
    """Volume 1 of 1, directory SYS, carrying one page for image page 0."""
    return make_volume(
        "single.img",
        [([0, SKIP, SKIP, SKIP, SKIP, SKIP, SKIP, SKIP], 1)],
        pad=False,
    )


@pytest.fixture
def header_only_volume(make_volume) -> Path:
    """Exactly 16384 bytes: a header whose first entry terminates the map."""
    return make_volume("empty.img", [], pad=False)


@pytest.fixture
def output_image(tmp_path) -> Path:
    return tmp_path / "image.nd"
