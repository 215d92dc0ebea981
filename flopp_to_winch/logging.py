from __future__ import annotations

import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "FLOPP_TO_WINCH_LOG_DIR",
        Path.home() / ".local" / "state" / "flopp-to-winch" / "logs",
    )
)


def _should_log_page(record) -> bool:
    """Filter per-page placement logs - only show in TRACE mode."""
    tags = record["extra"].get("tags", [])

    if "page" in tags:
        return record["level"].no <= logger.level("TRACE").no

    return True


def _should_log_console(record) -> bool:
    """Keep volume failures off the console; the CLI prints those itself."""
    if "failure" in record["extra"].get("tags", []):
        return False

    return _should_log_page(record)


def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | None = None,
    file_logging: bool = True,
) -> Logger:
    """
    Setup console and file logging for a restore run.

    Logging Tiers:
    - ERROR: Volume or image failures
    - SUCCESS/INFO: Volume processed, run summary
    - DEBUG: Header fields, page map decoding
    - TRACE: Every page placement

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when --debug is enabled (3 day retention)
    - structured.jsonl: Structured JSON logs for analysis (7 day retention)

    Args:
        verbose: Show INFO messages on the console
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (one line per page)
        log_dir: Custom log directory (defaults to ~/.local/state/flopp-to-winch/logs)
        file_logging: Write log files in addition to the console
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "APP"})
    logger.enable("flopp_to_winch")

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    elif verbose:
        console_level = "INFO"
    else:
        console_level = "WARNING"

    # Console (stderr); stdout is reserved for the volume report
    logger.add(
        sys.stderr,
        level=console_level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=_should_log_console,
        colorize=None,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <15}</cyan> | "
            "{message}"
        ),
    )

    if not file_logging:
        return logger

    log_dir = log_dir or DEFAULT_LOG_DIR
    sink_ids: list[int] = []
    try:
        _add_file_sinks(log_dir, sink_ids, debug=debug, trace=trace)
    except OSError as e:
        for sink_id in sink_ids:
            logger.remove(sink_id)
        logger.warning(
            "File logging disabled, cannot write to {}: {}",
            log_dir,
            e.strerror or e,
        )

    return logger


def _add_file_sinks(log_dir: Path, sink_ids: list[int], *, debug: bool, trace: bool) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    sink_ids.append(
        logger.add(
            log_dir / "operations.log",
            level="INFO",
            rotation="5 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
            backtrace=False,
            diagnose=False,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <15} | "
                "{extra[job_id]: <15} | "
                "{message}"
            ),
        )
    )

    if debug or trace:
        sink_ids.append(
            logger.add(
                log_dir / "debug.log",
                level="TRACE" if trace else "DEBUG",
                rotation="10 MB",
                retention="3 days",
                compression="zip",
                enqueue=True,
                backtrace=True,
                diagnose=True,
                format=(
                    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                    "{level: <8} | "
                    "{extra[source]: <15} | "
                    "{extra[job_id]: <15} | "
                    "{extra[tags]} | "
                    "{message}"
                ),
            )
        )

    sink_ids.append(
        logger.add(
            log_dir / "structured.jsonl",
            level="INFO",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
            serialize=True,
            format="{message}",
        )
    )


def get_logger(
    *,
    job_id: str | None = None,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        job_id: Job identifier for tracking operations
        tags: Tags for filtering (e.g., ["volume", "image"])
        source: Source component (e.g., module name)

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if job_id is not None:
        extras["job_id"] = job_id
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for tracking an operation with automatic timing.

    Logs operation start, completion, and failure with duration tracking.

    Args:
        operation: Operation name (e.g., "merge", "report")
        **details: Operation-specific details to log

    Yields:
        Logger bound with job_id and operation context

    Example:
        with operation_context("merge", volume="vol1.img") as log:
            log.debug("Writing pages")
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(job_id=job_id, operation=operation, **details):
        start_time = time.time()
        log = logger.bind(source=operation, job_id=job_id, tags=[operation])

        log.info(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.success(
                f"{operation.capitalize()} completed",
                duration_seconds=round(duration, 2),
            )
        except Exception as e:
            duration = time.time() - start_time
            log.error(
                f"{operation.capitalize()} failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 2),
            )
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.
    """

    @staticmethod
    def for_volume(volume: str | None = None) -> Logger:
        """Logger for reading backup volumes."""
        return logger.bind(source="volume", tags=["volume"], volume=volume or "-")

    @staticmethod
    def for_image(image: str | None = None) -> Logger:
        """Logger for output image updates."""
        return logger.bind(source="image", tags=["image"], image=image or "-")

    @staticmethod
    def for_page(image: str | None = None) -> Logger:
        """Logger for individual page placements (TRACE only)."""
        return logger.bind(source="image", tags=["image", "page"], image=image or "-")

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, configuration and shutdown."""
        return logger.bind(source="system", tags=["system"])
