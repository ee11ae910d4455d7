"""Configuration management for stencil."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any
from urllib.parse import SplitResult

import yaml

from .exceptions import ConfigError, DataSourceError


@dataclass
class HTTPConfig:
    """HTTP provider configuration."""

    timeout: float = 30.0
    user_agent: str = "stencil/1.0"
    follow_redirects: bool = True


@dataclass
class DataSourceConfig:
    """A datasource bound from configuration.

    Attributes:
        url: Parsed base reference.
        header: HTTP headers sent with http(s) requests for this datasource.
    """

    url: SplitResult
    header: dict[str, list[str]] = field(default_factory=dict)


def _default_stdin() -> IO[bytes]:
    return sys.stdin.buffer


@dataclass
class Config:
    """Main application configuration."""

    datasources: dict[str, DataSourceConfig] = field(default_factory=dict)
    context: dict[str, DataSourceConfig] = field(default_factory=dict)
    # headers for aliases not (yet) defined as datasources
    extra_headers: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    stdin: IO[bytes] = field(default_factory=_default_stdin)
    http: HTTPConfig = field(default_factory=HTTPConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if timeout := os.environ.get("STENCIL_HTTP_TIMEOUT"):
            try:
                config.http.timeout = float(timeout)
            except ValueError as e:
                raise ConfigError(f"invalid STENCIL_HTTP_TIMEOUT {timeout!r}") from e

        if user_agent := os.environ.get("STENCIL_USER_AGENT"):
            config.http.user_agent = user_agent

        return config

    @classmethod
    def from_file(cls, path: Path | str) -> "Config":
        """Load configuration from a YAML file, then apply the environment.

        The file may contain ``datasources`` and ``context`` mappings of
        alias to either a URL string or ``{url: ..., header: {...}}``, and a
        ``headers`` mapping of alias to ``{Name: value-or-list}``.

        Raises:
            ConfigError: If the file can't be read or is malformed.
        """
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigError(f"couldn't read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in config file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"config file {path} must contain a mapping")

        config = cls.from_env()
        config.datasources.update(_datasources_from_dict(raw.get("datasources")))
        config.context.update(_datasources_from_dict(raw.get("context")))
        for alias, headers in (raw.get("headers") or {}).items():
            config.extra_headers[alias] = _headers_from_dict(headers)
        return config

    def parse_datasource_flags(
        self,
        datasources: list[str] | None = None,
        contexts: list[str] | None = None,
        headers: list[str] | None = None,
    ) -> None:
        """Apply ``alias=url`` datasource/context flags and ``alias=Name: value`` headers.

        Headers for an alias defined by one of the flags are attached to that
        datasource; the rest are kept in ``extra_headers`` for datasources
        defined later.

        Raises:
            ConfigError: If any flag is malformed.
        """
        parsed_headers: dict[str, dict[str, list[str]]] = {}
        for arg in headers or []:
            alias, name, value = parse_header_arg(arg)
            parsed_headers.setdefault(alias, {}).setdefault(name, []).append(value)

        for arg in datasources or []:
            alias, url = parse_datasource_arg(arg)
            self.datasources[alias] = DataSourceConfig(
                url=url, header=parsed_headers.pop(alias, {})
            )

        for arg in contexts or []:
            alias, url = parse_datasource_arg(arg)
            self.context[alias] = DataSourceConfig(
                url=url, header=parsed_headers.pop(alias, {})
            )

        for alias, hdrs in parsed_headers.items():
            merged = self.extra_headers.setdefault(alias, {})
            for name, values in hdrs.items():
                merged.setdefault(name, []).extend(values)


def parse_datasource_arg(value: str) -> tuple[str, SplitResult]:
    """Parse an ``alias=url`` datasource flag.

    Without ``=``, the alias is the file's base name without extension.

    Raises:
        ConfigError: If no alias can be derived or the URL is invalid.
    """
    # Import here to avoid circular imports
    from ..sources.urls import parse_source_url

    alias, sep, url = value.partition("=")
    if not sep:
        url = value
        alias = Path(value.split("?", 1)[0]).stem
    if not alias:
        raise ConfigError(f"invalid datasource {value!r}: alias must be provided")

    try:
        return alias, parse_source_url(url)
    except DataSourceError as e:
        raise ConfigError(f"invalid datasource URL for '{alias}': {e}") from e


def parse_header_arg(value: str) -> tuple[str, str, str]:
    """Parse an ``alias=Name: value`` header flag.

    Returns:
        Tuple of (alias, canonical header name, header value).

    Raises:
        ConfigError: If the flag is malformed.
    """
    alias, sep, header = value.partition("=")
    name, colon, header_value = header.partition(":")
    if not sep or not alias or not colon or not name.strip():
        raise ConfigError(
            f"invalid datasource-header {value!r}: expected alias=Name: value"
        )
    return alias, canonical_header_name(name.strip()), header_value.strip()


def canonical_header_name(name: str) -> str:
    """Canonicalize a header name: ``accept-encoding`` -> ``Accept-Encoding``."""
    return "-".join(part.capitalize() for part in name.split("-"))


def _datasources_from_dict(raw: Any) -> dict[str, DataSourceConfig]:
    from ..sources.urls import parse_source_url

    result: dict[str, DataSourceConfig] = {}
    for alias, entry in (raw or {}).items():
        if isinstance(entry, str):
            entry = {"url": entry}
        if not isinstance(entry, dict) or "url" not in entry:
            raise ConfigError(f"datasource '{alias}' must be a URL or have a 'url' key")
        try:
            url = parse_source_url(str(entry["url"]))
        except DataSourceError as e:
            raise ConfigError(f"invalid datasource URL for '{alias}': {e}") from e
        result[alias] = DataSourceConfig(
            url=url, header=_headers_from_dict(entry.get("header"))
        )
    return result


def _headers_from_dict(raw: Any) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for name, value in (raw or {}).items():
        values = value if isinstance(value, list) else [value]
        headers[canonical_header_name(str(name))] = [str(v) for v in values]
    return headers
