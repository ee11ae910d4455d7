"""Core configuration and exceptions for stencil."""

from .config import Config, DataSourceConfig, HTTPConfig
from .exceptions import (
    BackendFetchError,
    ConfigError,
    DataSourceError,
    DecodeError,
    InvalidMediaTypeError,
    ReferenceParseError,
    StencilError,
    TooManyArgumentsError,
    UndefinedAliasError,
    UnregisteredSchemeError,
    UnsupportedContentTypeError,
)

__all__ = [
    "Config",
    "DataSourceConfig",
    "HTTPConfig",
    "BackendFetchError",
    "ConfigError",
    "DataSourceError",
    "DecodeError",
    "InvalidMediaTypeError",
    "ReferenceParseError",
    "StencilError",
    "TooManyArgumentsError",
    "UndefinedAliasError",
    "UnregisteredSchemeError",
    "UnsupportedContentTypeError",
]
