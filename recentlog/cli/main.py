#!/usr/bin/env python3
"""
Main entry point for the recentlog command line.

Usage:
    # Record a visit to a directory
    recentlog add ~/src/project

    # Print the 20 most recently recorded entries
    recentlog list -n 20

    # Forget everything except the 10 most recent entries
    recentlog clear --keep 10
"""

import argparse
import sys
from typing import List, Optional

import yaml

from recentlog import __version__
from recentlog.cli.paths import canonicalize, home_directory, shorten, to_entry
from recentlog.core.log import Log, RecentLogError
from recentlog.utils.config import Config
from recentlog.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def non_negative_int(value: str) -> int:
    """Argument type for counts."""
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="recentlog",
        description="recentlog - remember the most recently used paths",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (default: $XDG_CONFIG_HOME/recentlog/config.yaml)",
    )

    parser.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        help="Directory holding the cache file (default: $XDG_DATA_HOME/recentlog)",
    )

    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Name of the cache file (default: history)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Record an entry")
    add_parser.add_argument("path", type=str, help="Path to record")
    add_parser.add_argument(
        "--no-check",
        action="store_true",
        help="Store the argument as given instead of requiring an existing path",
    )

    list_parser = subparsers.add_parser("list", help="Print the most recent entries")
    list_parser.add_argument(
        "-n",
        "--count",
        type=non_negative_int,
        default=None,
        help="Number of entries to print (default: cache.retain)",
    )
    list_parser.add_argument(
        "--chronological",
        action="store_true",
        help="Print oldest first",
    )
    list_parser.add_argument(
        "--absolute",
        action="store_true",
        help="Do not shorten paths under the home directory to ~",
    )

    clear_parser = subparsers.add_parser("clear", help="Erase entries")
    clear_parser.add_argument(
        "--keep",
        type=non_negative_int,
        default=None,
        help="Keep this many of the most recent entries",
    )

    subparsers.add_parser("delete", help="Remove the cache file")
    subparsers.add_parser("verify", help="Check that the cache file is well formed")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Load configuration and apply command-line overrides."""
    config = Config(args.config)

    if args.cache_dir:
        config.set("cache.directory", args.cache_dir)

    if args.name:
        config.set("cache.name", args.name)

    if args.log_level:
        config.set("logging.level", args.log_level)

    config.validate()

    return config


def open_log(config: Config) -> Log:
    """Open the cache file named by the configuration."""
    return Log(
        config.cache_path(),
        compaction_threshold_bytes=config.get("cache.compaction_threshold_bytes", 65536),
        encoding=config.get("cache.encoding", "utf-8"),
    )


def cmd_add(log: Log, args: argparse.Namespace) -> None:
    """Append one entry and make it durable."""
    if args.no_check:
        entry = to_entry(args.path)
    else:
        path = canonicalize(args.path)
        if path is None:
            logger.debug("Ignoring path that does not exist", path=args.path)
            return
        entry = to_entry(path)

    log.append(entry)
    log.sync()


def cmd_list(log: Log, args: argparse.Namespace, config: Config) -> None:
    """Print the most recent distinct entries."""
    retain = config.get("cache.retain", 100)
    count = args.count if args.count is not None else retain

    # compaction keeps at least cache.retain entries whatever is displayed
    entries = log.recent(max(count, retain))[:count]

    if args.chronological:
        entries.reverse()

    home = None if args.absolute else home_directory()

    lines = []
    for entry in entries:
        if isinstance(entry, bytes):
            entry = entry.decode(errors="replace")
        lines.append(entry if home is None else shorten(entry, home))

    if lines:
        sys.stdout.write("\n".join(lines) + "\n")
    sys.stdout.flush()


def cmd_clear(log: Log, args: argparse.Namespace) -> None:
    """Erase all entries, or all but the most recent ones."""
    if args.keep is None or args.keep == 0:
        log.clear()
        log.sync()
    else:
        log.compact(args.keep)


def run(args: argparse.Namespace, config: Config) -> None:
    """Dispatch a parsed command against the configured log."""
    log = open_log(config)

    if args.command == "delete":
        log.delete()
        return

    with log:
        if args.command == "add":
            cmd_add(log, args)
        elif args.command == "list":
            cmd_list(log, args, config)
        elif args.command == "clear":
            cmd_clear(log, args)
        elif args.command == "verify":
            records = log.verify()
            sys.stdout.write(f"{records} entries\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        sys.stderr.write(f"recentlog: could not load configuration: {e}\n")
        return 1

    configure_logging(
        log_level=config.get("logging.level", "WARNING"),
        log_format=config.get("logging.format", "console"),
        log_output="stderr",
    )

    try:
        run(args, config)
    except (RecentLogError, OSError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        sys.stderr.write(f"recentlog: {e}\n")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
