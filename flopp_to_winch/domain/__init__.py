"""Domain objects shared across the restore workflow."""

from .models import RestoreRun, RunMode, VolumeResult

__all__ = ["RestoreRun", "RunMode", "VolumeResult"]
