"""CLI entry point for stencil."""

import argparse
import sys
from typing import NoReturn

from loguru import logger

from ..core.config import Config
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stencil",
        description="Read aliased, URL-addressed datasources as structured data",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    parser.add_argument(
        "-d",
        "--datasource",
        action="append",
        default=[],
        metavar="ALIAS=URL",
        help="Define a datasource (repeatable)",
    )
    parser.add_argument(
        "-c",
        "--context",
        action="append",
        default=[],
        metavar="ALIAS=URL",
        help="Define a context datasource (repeatable)",
    )
    parser.add_argument(
        "-H",
        "--datasource-header",
        action="append",
        default=[],
        metavar="'ALIAS=Name: value'",
        help="HTTP header for a datasource (repeatable)",
    )
    parser.add_argument("--config", help="YAML config file defining datasources")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=False)

    subparsers.add_parser("list", help="List defined datasources")

    read_parser = subparsers.add_parser(
        "read", help="Read and decode a datasource, printed as JSON"
    )
    commands.add_read_arguments(read_parser)
    read_parser.add_argument(
        "--pretty", action="store_true", help="Indent the JSON output"
    )

    include_parser = subparsers.add_parser(
        "include", help="Print the raw content of a datasource"
    )
    commands.add_read_arguments(include_parser)

    return parser


def configure_logging(verbose: bool) -> None:
    """Send log output to stderr, at debug level when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def load_config(args) -> Config:
    """Build the configuration from the config file, environment and flags."""
    config = Config.from_file(args.config) if args.config else Config.from_env()
    config.parse_datasource_flags(
        args.datasource, args.context, args.datasource_header
    )
    return config


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args)

        if args.command == "list":
            commands.handle_list(args, config)
        elif args.command == "read":
            commands.handle_read(args, config)
        elif args.command == "include":
            commands.handle_include(args, config)
        else:
            parser.print_help()

        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
