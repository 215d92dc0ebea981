import argparse
import sys

from flopp_to_winch.__version__ import __version__
from flopp_to_winch.config import settings
from flopp_to_winch.domain.models import VolumeResult
from flopp_to_winch.logging import LoggerFactory, logger, setup_logging
from flopp_to_winch.services.restore import restore_volumes
from flopp_to_winch.storage.report import format_page_count, format_volume_summary


PROG = "flopp-to-winch"

DESCRIPTION = (
    "Recreate an ND filesystem image from floppy disks or floppy disk images "
    'made with the SINTRAN-III backup utility "WINCH-TO-FLOPP".'
)

EPILOG = (
    "If no output file is given with -o, only information about the backup "
    "volume(s) is printed. The output file is updated if it exists already, "
    "so volumes can be added one or more at a time."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description=DESCRIPTION, epilog=EPILOG)
    parser.add_argument("volumes", nargs="*", metavar="VOLUME", help="Backup volume files, in order")
    parser.add_argument("-o", "--output", metavar="IMAGE", help="Write decoded image to IMAGE")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Log every page placement")
    parser.add_argument("-V", "--version", action="store_true", help="Show version number and exit")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(
            f"{PROG}: Tool to restore image from backup floppies, version {__version__}",
            file=sys.stderr,
        )
        return 1

    if not args.volumes:
        parser.error("at least one volume file is required")

    settings.load_settings()
    setup_logging(
        verbose=args.verbose,
        debug=args.debug,
        trace=args.trace,
        log_dir=settings.get_log_dir(),
        file_logging=settings.get_bool("file_logging_enabled", True),
    )
    system_log = LoggerFactory.for_system()
    system_log.debug("Starting {} {} with {} volume(s)", PROG, __version__, len(args.volumes))

    shown = []

    def start_volume(result: VolumeResult) -> None:
        # Blank line between volumes
        if shown:
            print()
        shown.append(result.path)

    def show_header(result: VolumeResult) -> None:
        start_volume(result)
        for line in format_volume_summary(result.header):
            print(line)

    def show_result(result: VolumeResult) -> None:
        if result.header is None:
            start_volume(result)
        if not result.ok:
            print(f"{PROG}: {result.error}", file=sys.stderr)
        elif args.output is None:
            print(format_page_count(result.pages))
        sys.stdout.flush()

    try:
        run = restore_volumes(
            args.volumes,
            args.output,
            on_header=show_header,
            on_volume=show_result,
        )
    finally:
        logger.complete()

    return 0 if run.ok else 1


if __name__ == "__main__":
    sys.exit(main())
