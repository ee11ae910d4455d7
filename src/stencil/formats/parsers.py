"""Parsers for the structured formats datasources can hold.

Each parser takes text and returns a plain Python value, raising the
underlying library's error (a ``ValueError`` subclass, ``yaml.YAMLError`` or
``csv.Error``) when the text doesn't parse as the expected shape.
"""

from __future__ import annotations

import csv
import io
import json
import tomllib
from datetime import date, datetime
from typing import Any

import yaml
from dotenv import dotenv_values


def json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object."""
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


def json_value(text: str) -> Any:
    """Parse any JSON value, scalars included."""
    return json.loads(text)


def json_array(text: str) -> list[Any]:
    """Parse a JSON array."""
    value = json.loads(text)
    if not isinstance(value, list):
        raise ValueError(f"expected a JSON array, got {type(value).__name__}")
    return value


def yaml_object(text: str) -> dict[str, Any]:
    """Parse a YAML mapping. An empty document is an empty mapping."""
    value = yaml.safe_load(text)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected a YAML mapping, got {type(value).__name__}")
    return value


def yaml_array(text: str) -> list[Any]:
    """Parse a YAML sequence. An empty document is an empty sequence."""
    value = yaml.safe_load(text)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"expected a YAML sequence, got {type(value).__name__}")
    return value


def csv_rows(text: str) -> list[list[str]]:
    """Parse CSV into rows of string fields."""
    return [row for row in csv.reader(io.StringIO(text), strict=True) if row]


def toml_object(text: str) -> dict[str, Any]:
    """Parse a TOML document."""
    return tomllib.loads(text)


def dotenv_object(text: str) -> dict[str, str | None]:
    """Parse ``KEY=VALUE`` lines (``.env`` syntax) into a flat mapping."""
    return dict(dotenv_values(stream=io.StringIO(text)))


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any, indent: int | None = None) -> str:
    """Encode a value as JSON (datetimes as ISO-8601), compact unless indented."""
    separators = None if indent else (",", ":")
    return json.dumps(value, indent=indent, separators=separators, default=_json_default)
