"""Media type resolution for datasource content.

The media type of a datasource read decides how its content is decoded. It is
determined by these rules, first match wins:

1. the ``type`` query parameter of the read argument
2. the ``type`` query parameter of the datasource URL
3. the type already known for the datasource (configured or detected)
4. the type registered for the argument's file extension
5. the type registered for the datasource URL's file extension
6. ``text/plain``

Spaces in a query-supplied type are read as ``+``, so that callers don't need
to escape ``application/array+json``.
"""

from __future__ import annotations

import mimetypes
import posixpath
import re
from urllib.parse import SplitResult

from loguru import logger

from ..core.exceptions import InvalidMediaTypeError
from .urls import parse_reference, query_param

TEXT_MIMETYPE = "text/plain"
CSV_MIMETYPE = "text/csv"
JSON_MIMETYPE = "application/json"
JSON_ARRAY_MIMETYPE = "application/array+json"
TOML_MIMETYPE = "application/toml"
YAML_MIMETYPE = "application/yaml"
ENV_MIMETYPE = "application/x-env"

# Non-canonical media types that are sometimes seen in the wild
MIME_TYPE_ALIASES: dict[str, str] = {
    "application/x-yaml": YAML_MIMETYPE,
    "application/text": TEXT_MIMETYPE,
}

_extension_types: dict[str, str] = {}

# RFC 2045 token
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MEDIA_TYPE_RE = re.compile(rf"^({_TOKEN})/({_TOKEN})$")
_PARAM_RE = re.compile(rf'^({_TOKEN})=({_TOKEN}|"(?:[^"\\]|\\.)*")$')


def mime_alias(media_type: str) -> str:
    """Canonicalize known non-standard spellings of a media type."""
    return MIME_TYPE_ALIASES.get(media_type, media_type)


def register_extension(ext: str, media_type: str) -> None:
    """Register the media type for a file extension (e.g. ``.json``).

    Raises:
        ValueError: If the extension doesn't start with a dot.
    """
    if not ext.startswith("."):
        raise ValueError(f"extension {ext!r} must start with '.'")
    previous = _extension_types.get(ext.lower())
    if previous is not None and previous != media_type:
        logger.warning(f"Overwriting media type for {ext!r}: {previous} -> {media_type}")
    _extension_types[ext.lower()] = media_type


def type_by_extension(ext: str) -> str:
    """Return the media type registered for an extension, or ``""``.

    Registered types take precedence over the platform's ``mimetypes``
    database.
    """
    if not ext:
        return ""
    registered = _extension_types.get(ext.lower())
    if registered is not None:
        return registered
    guessed, _ = mimetypes.guess_type("file" + ext, strict=False)
    return guessed or ""


def parse_media_type(value: str) -> str:
    """Parse a media type, discarding parameters.

    Returns:
        The lower-cased ``type/subtype``.

    Raises:
        InvalidMediaTypeError: If the value isn't a well-formed media type.
    """
    base, *params = value.split(";")
    match = _MEDIA_TYPE_RE.match(base.strip())
    if match is None:
        raise InvalidMediaTypeError(value, "expected type/subtype")
    for param in params:
        param = param.strip()
        if param and not _PARAM_RE.match(param):
            raise InvalidMediaTypeError(value, f"invalid parameter {param!r}")
    return f"{match.group(1)}/{match.group(2)}".lower()


def _normalize_name(name: str) -> str:
    if name:
        if name.startswith("//"):
            name = name[1:]
        if not name.startswith("/"):
            name = "/" + name
    return name


def _extension(path: str) -> str:
    return posixpath.splitext(path)[1]


def guess_media_type(base: SplitResult, name: str = "", declared: str = "") -> str:
    """Determine the media type for reading ``name`` relative to ``base``.

    Args:
        base: The datasource URL.
        name: The read argument (relative path and/or query), may be empty.
        declared: The type already known for the datasource, may be empty.

    Returns:
        The canonical ``type/subtype`` (aliases are not normalized here).

    Raises:
        ReferenceParseError: If ``name`` can't be parsed.
        InvalidMediaTypeError: If the winning candidate is malformed.
    """
    name_url = parse_reference(_normalize_name(name))

    media_type = query_param(name_url, "type")
    if not media_type:
        media_type = query_param(base, "type")
    if not media_type:
        media_type = declared

    media_type = media_type.replace(" ", "+")

    if not media_type:
        media_type = type_by_extension(_extension(name_url.path))
    if not media_type:
        media_type = type_by_extension(_extension(base.path))

    if media_type:
        return parse_media_type(media_type)

    return TEXT_MIMETYPE


def _register_builtin_extensions() -> None:
    """Register types that are missing from some platforms' databases."""
    register_extension(".json", JSON_MIMETYPE)
    register_extension(".yml", YAML_MIMETYPE)
    register_extension(".yaml", YAML_MIMETYPE)
    register_extension(".csv", CSV_MIMETYPE)
    register_extension(".toml", TOML_MIMETYPE)
    register_extension(".env", ENV_MIMETYPE)


_register_builtin_extensions()
