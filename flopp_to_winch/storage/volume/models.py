"""Data models for ND backup volumes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


SKIP_PAGE = -1
SLOTS_PER_ENTRY = 8


@dataclass(frozen=True)
class VolumeHeader:
    volume_index: int
    volume_total: int
    directory_name: str
    label: bytes
    page_map: bytes

    @property
    def label_text(self) -> str:
        """Printable label: cut at the first NUL, high bit masked."""
        raw = self.label.split(b"\x00", 1)[0]
        return "".join(chr(byte & 0x7F) for byte in raw).rstrip()


@dataclass(frozen=True)
class PageMapEntry:
    """One page-map group: eight destination slots and their counter."""

    slots: tuple[int, ...]
    count: int

    @property
    def pages(self) -> Iterator[int]:
        """Destination pages carried by this volume, in payload order."""
        return (slot for slot in self.slots if slot != SKIP_PAGE)

    @property
    def skipped(self) -> int:
        return sum(1 for slot in self.slots if slot == SKIP_PAGE)
