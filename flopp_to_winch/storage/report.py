"""Human-readable volume summaries."""

from __future__ import annotations

from .volume import VolumeHeader, iter_page_map


def count_real_pages(header: VolumeHeader, max_pages: int) -> int:
    """Count the page map slots that carry a page in this volume."""
    total = 0
    for entry in iter_page_map(header.page_map, max_pages):
        total += len(entry.slots) - entry.skipped
    return total


def format_volume_summary(header: VolumeHeader) -> list[str]:
    return [
        f"Vol {header.volume_index:02d} of {header.volume_total:02d}",
        f"Dir {header.directory_name}",
        header.label_text,
    ]


def format_page_count(pages: int) -> str:
    return f"{pages} pages"
