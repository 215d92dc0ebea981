"""Tests for volume header parsing.

Covers:
- parse_volume_header field extraction
- HEADER_FIELDS layout
- read_volume_header short read and OS error handling
"""

from __future__ import annotations

import io
from unittest.mock import Mock

import pytest

from conftest import SKIP, build_header
from flopp_to_winch.storage.exceptions import InvalidVolumeError, VolumeReadError
from flopp_to_winch.storage.volume.header import (
    HEADER_FIELDS,
    HEADER_SIZE,
    PAGE_MAP_OFFSET,
    parse_volume_header,
    read_volume_header,
)
from flopp_to_winch.storage.volume.models import VolumeHeader


class TestConstants:
    def test_header_size(self):
        assert HEADER_SIZE == 16384

    def test_page_map_offset(self):
        assert PAGE_MAP_OFFSET == 76

    def test_field_layout(self):
        layout = {name: (f.offset, f.width) for name, f in HEADER_FIELDS.items()}
        assert layout == {
            "volume_index": (0, 2),
            "directory_name": (2, 16),
            "label": (18, 50),
            "volume_total": (68, 2),
        }


class TestParseVolumeHeader:
    def test_parses_fields(self):
        data = build_header(
            volume_index=3,
            volume_total=7,
            directory_name=b"PACK-ONE'",
            label=b"WEEKLY BACKUP",
        )
        header = parse_volume_header(data)

        assert isinstance(header, VolumeHeader)
        assert header.volume_index == 3
        assert header.volume_total == 7
        assert header.directory_name == "PACK-ONE"

    def test_label_is_verbatim(self):
        label = bytes(range(50))
        header = parse_volume_header(build_header(label=label))
        assert header.label == label
        assert len(header.label) == 50

    def test_label_text_trims_padding(self):
        header = parse_volume_header(build_header(label=b"SYSTEM BACKUP  "))
        assert header.label_text == "SYSTEM BACKUP"

    def test_label_text_masks_high_bit(self):
        header = parse_volume_header(build_header(label=b"\xc1\xc2\xc3"))
        assert header.label_text == "ABC"

    def test_unterminated_directory_name(self):
        header = parse_volume_header(build_header(directory_name=b"X" * 16))
        assert header.directory_name == "X" * 16

    def test_page_map_region(self):
        data = build_header([([0, SKIP, SKIP, SKIP, SKIP, SKIP, SKIP, SKIP], 1)])
        header = parse_volume_header(data)
        assert len(header.page_map) == HEADER_SIZE - PAGE_MAP_OFFSET
        assert header.page_map[:4] == b"\x00\x00\x00\x00"
        assert header.page_map[4:8] == b"\xff\xff\xff\xff"

    def test_only_header_bytes_are_used(self):
        data = build_header() + b"\xaa" * 4096
        header = parse_volume_header(data)
        assert len(header.page_map) == HEADER_SIZE - PAGE_MAP_OFFSET
        assert b"\xaa" not in header.page_map

    def test_too_short_is_invalid(self):
        with pytest.raises(InvalidVolumeError) as exc_info:
            parse_volume_header(b"\x00" * (HEADER_SIZE - 1), "short.img")
        assert exc_info.value.volume == "short.img"
        assert exc_info.value.size == HEADER_SIZE - 1

    def test_empty_is_invalid(self):
        with pytest.raises(InvalidVolumeError):
            parse_volume_header(b"")


class TestReadVolumeHeader:
    def test_reads_from_file_object(self):
        stream = io.BytesIO(build_header(volume_index=2) + b"\x00" * 2048)
        header = read_volume_header(stream, "vol.img")
        assert header.volume_index == 2
        assert stream.tell() == HEADER_SIZE

    def test_short_read_raises(self):
        stream = io.BytesIO(b"\x00" * 100)
        with pytest.raises(VolumeReadError) as exc_info:
            read_volume_header(stream, "vol.img")
        assert exc_info.value.volume == "vol.img"
        assert "short header" in str(exc_info.value)

    def test_os_error_raises(self):
        stream = Mock()
        stream.read.side_effect = OSError(5, "Input/output error")
        with pytest.raises(VolumeReadError) as exc_info:
            read_volume_header(stream, "/dev/fd0")
        assert "Input/output error" in str(exc_info.value)
        assert "/dev/fd0" in str(exc_info.value)
