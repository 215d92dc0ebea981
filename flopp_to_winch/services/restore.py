"""Multi-volume restore driver.

Volumes are processed strictly in the order given; the volume index and total
stored in each header are reported but never used to reorder the set.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from flopp_to_winch.config import settings
from flopp_to_winch.domain.models import RestoreRun, RunMode, VolumeResult
from flopp_to_winch.logging import LoggerFactory, get_logger, operation_context
from flopp_to_winch.storage.exceptions import (
    InvalidVolumeError,
    RestoreError,
    VolumeOpenError,
)
from flopp_to_winch.storage.image_writer import write_volume_pages
from flopp_to_winch.storage.report import count_real_pages
from flopp_to_winch.storage.volume import HEADER_SIZE, max_pages_for, read_volume_header


PathLike = Union[str, Path]

log = get_logger(source=__name__, tags=["restore"])


def _device_max_pages() -> int:
    return settings.get_int("device_max_pages", settings.DEFAULT_DEVICE_MAX_PAGES)


def process_volume(
    path: PathLike,
    output: Optional[PathLike] = None,
    *,
    on_header: Optional[Callable[[VolumeResult], None]] = None,
) -> VolumeResult:
    """Read one volume and either count its pages or merge them into ``output``.

    Failures are recorded on the returned result rather than raised.

    Args:
        path: Volume file or floppy device
        output: Image to update; None only reports
        on_header: Called once the header has been parsed, before any pages
            are written
    """
    volume = str(path)
    result = VolumeResult(path=volume)
    volume_log = LoggerFactory.for_volume(volume)

    try:
        try:
            st = os.stat(volume)
        except OSError as e:
            raise VolumeOpenError(volume, e.strerror or str(e)) from e

        if stat.S_ISREG(st.st_mode) and st.st_size < HEADER_SIZE:
            raise InvalidVolumeError(volume, st.st_size)

        result.max_pages = max_pages_for(st, _device_max_pages())

        try:
            volume_file = open(volume, "rb")
        except OSError as e:
            raise VolumeOpenError(volume, e.strerror or str(e)) from e

        with volume_file:
            result.header = read_volume_header(volume_file, volume)
            volume_log.debug(
                "Volume {}/{} dir={!r} max_pages={}",
                result.header.volume_index,
                result.header.volume_total,
                result.header.directory_name,
                result.max_pages,
            )
            if on_header is not None:
                on_header(result)

            if output is None:
                result.pages = count_real_pages(result.header, result.max_pages)
            else:
                result.pages = write_volume_pages(
                    volume_file, volume, result.header, result.max_pages, output
                )
    except RestoreError as e:
        volume_log.bind(tags=["volume", "failure"]).error(str(e))
        result.error = e
        return result

    volume_log.info("Processed {} ({} pages)", volume, result.pages)
    return result


def restore_volumes(
    paths: Iterable[PathLike],
    output: Optional[PathLike] = None,
    *,
    on_header: Optional[Callable[[VolumeResult], None]] = None,
    on_volume: Optional[Callable[[VolumeResult], None]] = None,
) -> RestoreRun:
    """Process a volume set in caller order.

    Without ``output`` every volume is reported and failures do not stop the
    run. With ``output`` pages are merged into the image and the first failing
    volume ends the run; the image is only complete once every volume has
    been merged.

    Args:
        paths: Volume files, in the order they should be applied
        output: Image to create or update, or None to only report
        on_header: Called per volume once its header is parsed
        on_volume: Called with each VolumeResult as soon as it is final

    Returns:
        RestoreRun with one result per attempted volume
    """
    paths = [str(path) for path in paths]
    mode = RunMode.for_output(output)
    run = RestoreRun(mode=mode, output=None if output is None else str(output))

    with operation_context(mode.value, volumes=len(paths), output=run.output or "-"):
        for index, path in enumerate(paths):
            result = process_volume(path, output, on_header=on_header)
            run.results.append(result)
            if on_volume is not None:
                on_volume(result)
            if not result.ok and mode.stops_on_error:
                remaining = len(paths) - index - 1
                run.aborted = remaining > 0
                if remaining:
                    log.warning(
                        "Stopping merge after {} failed; {} volume(s) not applied",
                        path,
                        remaining,
                    )
                break

    return run
