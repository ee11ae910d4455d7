"""Command implementations for stencil CLI."""

from .datasource import add_read_arguments, handle_include, handle_list, handle_read

__all__ = [
    "add_read_arguments",
    "handle_include",
    "handle_list",
    "handle_read",
]
