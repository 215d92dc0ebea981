"""Page map decoding.

The page map is a run of 36-byte entries starting at header offset 76. Each
entry holds eight big-endian int32 destination slots followed by a big-endian
uint32 counter. A slot of -1 means the volume does not carry that page; a
counter of 0 marks the end of a short volume.
"""

from __future__ import annotations

import os
import stat
from typing import Iterator

from flopp_to_winch.logging import get_logger

from .codec import read_i32_be, read_u32_be
from .header import HEADER_SIZE, PAGE_SIZE
from .models import SLOTS_PER_ENTRY, PageMapEntry


ENTRY_SIZE = SLOTS_PER_ENTRY * 4 + 4

# HD floppy capacity, used when the volume is read from a device node
FLOPPY_MAX_PAGES = 608


log = get_logger(source=__name__, tags=["volume"])


def iter_page_map(page_map: bytes, max_pages: int) -> Iterator[PageMapEntry]:
    """Yield page map entries until the volume's page budget is used up.

    Decoding stops before an entry once ``max_pages`` slots have been
    produced, or without yielding when an entry's counter is 0. Slot values
    other than -1 are passed through unchecked.
    """
    offset = 0
    produced = 0
    while produced < max_pages:
        if offset + ENTRY_SIZE > len(page_map):
            log.warning(
                "Page map exhausted after {} slots (budget {})", produced, max_pages
            )
            return
        slots = tuple(
            read_i32_be(page_map, offset + 4 * index)
            for index in range(SLOTS_PER_ENTRY)
        )
        count = read_u32_be(page_map, offset + 4 * SLOTS_PER_ENTRY)
        offset += ENTRY_SIZE
        if count == 0:
            log.debug("Short volume: page map ends after {} slots", produced)
            return
        produced += SLOTS_PER_ENTRY
        yield PageMapEntry(slots=slots, count=count)


def max_pages_for(st: os.stat_result, device_pages: int = FLOPPY_MAX_PAGES) -> int:
    """Upper bound on payload pages a volume can hold.

    Regular files are bounded by their size; anything else is assumed to be a
    floppy device and relies on the page map to mark its end.
    """
    if stat.S_ISREG(st.st_mode):
        return max(0, (st.st_size - HEADER_SIZE) // PAGE_SIZE)
    return device_pages
