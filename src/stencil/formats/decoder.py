"""Decode datasource content according to its media type."""

from __future__ import annotations

import csv
from typing import Any, Callable

import yaml

from ..core.exceptions import DecodeError, UnsupportedContentTypeError
from ..sources.media_types import (
    CSV_MIMETYPE,
    ENV_MIMETYPE,
    JSON_ARRAY_MIMETYPE,
    JSON_MIMETYPE,
    TEXT_MIMETYPE,
    TOML_MIMETYPE,
    YAML_MIMETYPE,
    mime_alias,
)
from .parsers import (
    csv_rows,
    dotenv_object,
    json_array,
    json_object,
    json_value,
    toml_object,
    yaml_array,
    yaml_object,
)

SNIPPET_LENGTH = 40

_PARSE_ERRORS = (ValueError, yaml.YAMLError, csv.Error)


def _decode(content_type: str, text: str, parser: Callable[[str], Any]) -> Any:
    try:
        return parser(text)
    except _PARSE_ERRORS as e:
        raise DecodeError(content_type, text[:SNIPPET_LENGTH], str(e)) from e


def _with_array_fallback(
    content_type: str,
    text: str,
    parser: Callable[[str], Any],
    array_parser: Callable[[str], Any],
) -> Any:
    try:
        return parser(text)
    except _PARSE_ERRORS:
        # maybe it's an array
        return _decode(content_type, text, array_parser)


def parse_data(media_type: str, text: str) -> Any:
    """Decode text as the given media type.

    Known aliases are normalized first. JSON and YAML content declared as an
    object is retried as an array before failing; JSON content may also be a
    top-level scalar.

    Returns:
        A mapping, list or string, depending on the type (or any JSON value
        for JSON).

    Raises:
        DecodeError: If the content doesn't parse.
        UnsupportedContentTypeError: If there is no decoder for the type.
    """
    content_type = mime_alias(media_type)

    if content_type == JSON_MIMETYPE:
        # objects first, then arrays and scalars
        return _with_array_fallback(content_type, text, json_object, json_value)
    if content_type == JSON_ARRAY_MIMETYPE:
        return _decode(content_type, text, json_array)
    if content_type == YAML_MIMETYPE:
        return _with_array_fallback(content_type, text, yaml_object, yaml_array)
    if content_type == CSV_MIMETYPE:
        return _decode(content_type, text, csv_rows)
    if content_type == TOML_MIMETYPE:
        return _decode(content_type, text, toml_object)
    if content_type == ENV_MIMETYPE:
        return _decode(content_type, text, dotenv_object)
    if content_type == TEXT_MIMETYPE:
        return text

    raise UnsupportedContentTypeError(media_type)


def parse_map(media_type: str, text: str) -> dict[str, Any]:
    """Decode text that must hold a mapping.

    Raises:
        DecodeError: If the content doesn't parse or isn't a mapping.
        UnsupportedContentTypeError: If there is no decoder for the type.
    """
    value = parse_data(media_type, text)
    if not isinstance(value, dict):
        raise DecodeError(
            mime_alias(media_type),
            text[:SNIPPET_LENGTH],
            f"expected a mapping, got {type(value).__name__}",
        )
    return value
