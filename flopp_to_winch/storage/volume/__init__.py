"""WINCH-TO-FLOPP backup volume support.

This package decodes backup volumes written by the SINTRAN-III utility
WINCH-TO-FLOPP.

Format structure:
- First 16384 bytes: header with volume number, directory name, label and
  the page map
- Remaining bytes: 2048-byte payload pages, one per non-skip page map slot

Integers are big-endian, as on the ND machines that wrote them.
"""
from .header import HEADER_SIZE, PAGE_SIZE, parse_volume_header, read_volume_header
from .models import SKIP_PAGE, PageMapEntry, VolumeHeader
from .page_map import FLOPPY_MAX_PAGES, iter_page_map, max_pages_for

__all__ = [
    "HEADER_SIZE",
    "PAGE_SIZE",
    "SKIP_PAGE",
    "FLOPPY_MAX_PAGES",
    "parse_volume_header",
    "read_volume_header",
    "iter_page_map",
    "max_pages_for",
    "PageMapEntry",
    "VolumeHeader",
]
