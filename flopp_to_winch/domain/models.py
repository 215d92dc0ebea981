"""Domain model for a restore run.

A run processes an ordered set of volumes in one of two modes and collects one
result per volume it attempted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from flopp_to_winch.storage.exceptions import RestoreError
from flopp_to_winch.storage.volume import VolumeHeader


# ==============================================================================
# Run Mode
# ==============================================================================


class RunMode(Enum):
    """How volumes are consumed.

    REPORT summarizes every volume and keeps going past failures. MERGE writes
    pages into an output image and stops at the first failure, since the image
    is meaningless without the failed volume's pages.
    """

    REPORT = "report"
    MERGE = "merge"

    @classmethod
    def for_output(cls, output: Optional[Union[str, Path]]) -> "RunMode":
        return cls.REPORT if output is None else cls.MERGE

    @property
    def stops_on_error(self) -> bool:
        return self is RunMode.MERGE


# ==============================================================================
# Results
# ==============================================================================


@dataclass
class VolumeResult:
    """Outcome of processing one volume file."""

    path: str
    header: Optional[VolumeHeader] = None
    max_pages: int = 0
    pages: int = 0  # Real pages counted (REPORT) or written (MERGE)
    error: Optional[RestoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RestoreRun:
    """All volume results of one invocation, in processing order."""

    mode: RunMode
    output: Optional[str] = None
    results: list[VolumeResult] = field(default_factory=list)
    aborted: bool = False  # MERGE stopped before the last volume

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failures(self) -> list[VolumeResult]:
        return [result for result in self.results if not result.ok]

    @property
    def total_pages(self) -> int:
        return sum(result.pages for result in self.results)
