"""Datasource commands for stencil CLI."""

import asyncio

from ...core.config import Config
from ...formats import to_json
from ...services import Data
from ...sources.urls import format_reference


def add_read_arguments(parser) -> None:
    """Add arguments shared by the read and include commands.

    Args:
        parser: Subcommand parser to configure.
    """
    parser.add_argument("alias", help="Datasource alias (or an absolute URL)")
    parser.add_argument(
        "arg",
        nargs="?",
        help="Extra path and/or query, resolved against the datasource URL",
    )


def handle_list(args, config: Config) -> None:
    """Handle list command: print the defined datasources.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    data = Data.from_config(config)
    for alias in data.list_datasources():
        source = data.lookup_source(alias)
        print(f"{alias}\t{format_reference(source.url)}")


def handle_read(args, config: Config) -> None:
    """Handle read command: print the decoded value as JSON.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    value = asyncio.run(_read_async(args, config))
    print(to_json(value, indent=2 if args.pretty else None))


def handle_include(args, config: Config) -> None:
    """Handle include command: print the raw content.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    text = asyncio.run(_include_async(args, config))
    print(text, end="")


async def _read_async(args, config: Config):
    async with Data.from_config(config) as data:
        return await data.datasource(args.alias, *_extra_args(args))


async def _include_async(args, config: Config) -> str:
    async with Data.from_config(config) as data:
        return await data.include(args.alias, *_extra_args(args))


def _extra_args(args) -> list[str]:
    return [args.arg] if args.arg is not None else []
