"""Application entry point and CLI for datafile-store.

This module implements the command-line interface over the data file
repository: inspecting the store, choosing the next file to send,
reclaiming space for an inbound transfer and packaging payload files.
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Final, NoReturn

from datafile_store.core.config import (
    ConfigurationError,
    MainConfig,
    load_main_config,
)
from datafile_store.core.packager import package_data_file
from datafile_store.core.repository import DataFileRepository
from datafile_store.core.settings import SettingKey
from datafile_store.utils.formatting import format_size
from datafile_store.utils.logging import configure_logging, set_correlation_id

__all__ = ["main", "run"]

DEFAULT_CONFIG_PATH: Final[Path] = Path("config/datafile-store.yaml")

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_CONFIG_ERROR: Final[int] = 1
EXIT_RUNTIME_ERROR: Final[int] = 2
EXIT_NOTHING_TO_DO: Final[int] = 3

logger = logging.getLogger(__name__)


def _byte_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        msg = f"invalid byte count: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if count < 0:
        msg = f"byte count must be non-negative: {count}"
        raise argparse.ArgumentTypeError(msg)
    return count


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    CLI Arguments:
        --config, -c: Path to main configuration file
        --log-level: Override log level from config
        --syslog: Enable syslog integration
    """
    parser = argparse.ArgumentParser(
        prog="datafile-store",
        description="Select, reclaim and package data files awaiting transfer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  datafile-store status
  datafile-store next --max-size 10485760
  datafile-store reclaim 3f2a9c 52428800
  datafile-store --config /path/to/config.yaml package report.pdf
        """,
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to main configuration file (default: {DEFAULT_CONFIG_PATH})",
        metavar="PATH",
    )
    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from configuration",
        metavar="LEVEL",
    )
    _ = parser.add_argument(
        "--syslog",
        action="store_true",
        help="Enable syslog integration (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    _ = subparsers.add_parser("status", help="Show data file counts and storage space")

    next_parser = subparsers.add_parser("next", help="Print the next data file to send")
    _ = next_parser.add_argument(
        "--max-size",
        type=_byte_count,
        default=sys.maxsize,
        help="Only consider files strictly smaller than this many bytes",
        metavar="BYTES",
    )

    reclaim_parser = subparsers.add_parser(
        "reclaim",
        help="Delete stale incomplete files until the target size fits",
    )
    _ = reclaim_parser.add_argument("file_id", help="Identity of the file being received")
    _ = reclaim_parser.add_argument("target_size", type=_byte_count, help="Bytes that need to fit")

    package_parser = subparsers.add_parser("package", help="Package a payload file into the store")
    _ = package_parser.add_argument("source", type=Path, help="Payload file to package")
    _ = package_parser.add_argument(
        "--origin-uid",
        help="Originating device identifier (default: stored unique identifier)",
    )

    return parser


def _origin_uid(repository: DataFileRepository) -> str:
    stored = repository.settings.get_string_setting(SettingKey.ORIGIN_UID)
    if stored is not None:
        return stored

    generated = str(uuid.uuid4())
    repository.settings.set_string_setting(SettingKey.ORIGIN_UID, generated)
    return generated


def _cmd_status(repository: DataFileRepository) -> int:
    information = repository.storage_information()
    print(f"Data directory:    {repository.data_directory()}")
    print(f"Complete files:    {len(repository.list_complete())}")
    print(f"Incomplete files:  {len(repository.list_incomplete())}")
    print(f"Total size:        {format_size(repository.total_size())}")
    print(f"Incomplete size:   {format_size(information.incomplete_files_space)}")
    print(f"Free space:        {format_size(information.free_space)}")
    print(f"Can receive files: {repository.can_receive_files()}")
    return EXIT_SUCCESS


def _cmd_next(repository: DataFileRepository, max_size: int) -> int:
    try:
        selected = repository.select_next_file_for_transfer(max_size)
    except (ValueError, TypeError) as exc:
        # Newest/oldest priorities need a numeric CreationTimestamp on every candidate
        print(f"Malformed or missing CreationTimestamp metadata: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    if selected is None:
        return EXIT_NOTHING_TO_DO
    print(selected.path)
    return EXIT_SUCCESS


def _cmd_reclaim(repository: DataFileRepository, file_id: str, target_size: int) -> int:
    set_correlation_id(file_id)
    if repository.delete_incomplete_files_for_space(file_id, target_size):
        return EXIT_SUCCESS
    print(f"Not enough space for {format_size(target_size)}", file=sys.stderr)
    return EXIT_NOTHING_TO_DO


def _cmd_package(repository: DataFileRepository, source: Path, origin_uid: str | None) -> int:
    directory = repository.data_directory()
    if directory is None:
        print("Data directory is unavailable", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    packaged = package_data_file(source, directory, origin_uid or _origin_uid(repository))
    print(packaged)
    return EXIT_SUCCESS


def dispatch(args: argparse.Namespace, config: MainConfig) -> int:
    """Run the selected subcommand against a repository built from config."""
    repository = DataFileRepository.from_config(config.store)
    command: str = args.command  # pyright: ignore[reportAny]  # argparse boundary

    if command == "status":
        return _cmd_status(repository)
    if command == "next":
        return _cmd_next(repository, args.max_size)  # pyright: ignore[reportAny]  # argparse boundary
    if command == "reclaim":
        return _cmd_reclaim(repository, args.file_id, args.target_size)  # pyright: ignore[reportAny]  # argparse boundary
    if command == "package":
        return _cmd_package(repository, args.source, args.origin_uid)  # pyright: ignore[reportAny]  # argparse boundary

    msg = f"Unknown command: {command}"
    raise ValueError(msg)


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load configuration and run a subcommand.

    Exit Codes:
        0: Success
        1: Configuration error
        2: Runtime I/O error
        3: Nothing to send / not enough reclaimable space
    """
    args = build_parser().parse_args(argv)
    config_path: Path = args.config  # pyright: ignore[reportAny]  # argparse boundary
    log_level: str | None = args.log_level  # pyright: ignore[reportAny]  # argparse boundary
    syslog: bool = args.syslog  # pyright: ignore[reportAny]  # argparse boundary

    try:
        config = load_main_config(config_path)
        if log_level is not None:
            config.application.log_level = log_level

        configure_logging(
            log_level=config.application.log_level,
            enable_syslog=syslog or config.application.syslog_enabled,
        )
        logger.debug("Configuration loaded", extra={"config_path": str(config_path)})

        return dispatch(args, config)

    except ConfigurationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    except OSError as exc:
        print(f"I/O error: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


def main() -> NoReturn:
    """Main entry point for the datafile-store command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
