"""Reference parsing, resolution and root/path splitting.

References are handled as ``urllib.parse.SplitResult`` values. Resolution
follows RFC 3986 for every scheme (``urljoin`` only resolves schemes it knows
about, which rules out ``aws+smp:``, ``merge:`` and friends), with one
deviation: query parameters of the base are kept and overridden by those of
the relative reference.
"""

from __future__ import annotations

import os
import posixpath
import re
from typing import Any
from urllib.parse import SplitResult, parse_qs, urlencode, urlsplit

from ..core.exceptions import ReferenceParseError, TooManyArgumentsError

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


# =============================================================================
# Parsing
# =============================================================================


def parse_reference(value: str) -> SplitResult:
    """Parse a reference, rejecting values that aren't valid URLs.

    Raises:
        ReferenceParseError: If the value contains control characters or
            can't be split into URL components.
    """
    if _CONTROL_CHARS.search(value):
        raise ReferenceParseError(value, "invalid control character in URL")
    try:
        parsed = urlsplit(value)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise ReferenceParseError(value, str(e)) from e
    return parsed


def parse_source_url(value: str) -> SplitResult:
    """Parse a datasource URL as given on the command line or in config.

    ``-`` means standard input. Values without a scheme are file paths,
    resolved against the working directory into absolute ``file://`` URLs
    (the query, and a trailing ``/``, are kept).
    """
    if value == "-":
        value = "stdin:"
    parsed = parse_reference(value)
    if parsed.scheme:
        return parsed

    cwd = SplitResult("file", "", os.getcwd().rstrip("/") + "/", "", "")
    return _resolve_reference(cwd, parsed)


def is_opaque(ref: SplitResult) -> bool:
    """True for ``scheme:data`` references with no authority and no rooted path."""
    return bool(ref.scheme) and not ref.netloc and bool(ref.path) and not ref.path.startswith("/")


def query_dict(query: str) -> dict[str, list[str]]:
    """Parse a raw query string into an ordered mapping of key to values."""
    return parse_qs(query, keep_blank_values=True)


def query_param(ref: SplitResult, key: str) -> str:
    """Return the first value of a query parameter, or ``""``."""
    values = query_dict(ref.query).get(key)
    return values[0] if values else ""


# =============================================================================
# Resolution
# =============================================================================


def resolve_url(base: SplitResult, rel: str) -> SplitResult:
    """Resolve ``rel`` against ``base``, merging query parameters.

    If ``base`` has no query, the result has exactly ``rel``'s query.
    Otherwise the result holds ``base``'s parameters with any key also present
    in ``rel`` set to ``rel``'s value; the merged query is encoded with sorted
    keys.

    Example:
        resolve_url(urlsplit("http://example.com/a/b/?n=2"), "bar.json?q=1")
        # -> http://example.com/a/b/bar.json?n=2&q=1

    Raises:
        ReferenceParseError: If ``rel`` can't be parsed.
    """
    rel_ref = parse_reference(rel)
    out = _resolve_reference(base, rel_ref)

    if base.query and rel_ref.query:
        merged = query_dict(base.query)
        for key, values in query_dict(rel_ref.query).items():
            merged[key] = values[:1]
        pairs = [(key, value) for key in sorted(merged) for value in merged[key]]
        out = out._replace(query=urlencode(pairs, safe="/"))
    elif base.query:
        out = out._replace(query=base.query)

    return out


def _resolve_reference(base: SplitResult, ref: SplitResult) -> SplitResult:
    """RFC 3986 section 5.2.2 reference resolution."""
    if ref.scheme:
        return ref._replace(path=_remove_dot_segments(ref.path))

    if ref.netloc:
        return SplitResult(
            base.scheme, ref.netloc, _remove_dot_segments(ref.path), ref.query, ref.fragment
        )

    if not ref.path:
        return SplitResult(
            base.scheme, base.netloc, base.path, ref.query or base.query, ref.fragment
        )

    if ref.path.startswith("/"):
        path = _remove_dot_segments(ref.path)
    else:
        path = _remove_dot_segments(_merge_paths(base, ref.path))
    return SplitResult(base.scheme, base.netloc, path, ref.query, ref.fragment)


def _merge_paths(base: SplitResult, ref_path: str) -> str:
    if base.netloc and not base.path:
        return "/" + ref_path
    return base.path[: base.path.rfind("/") + 1] + ref_path


def _remove_dot_segments(path: str) -> str:
    if not path:
        return path

    keep = 1 if path.startswith("/") else 0
    segments = path.split("/")
    resolved: list[str] = []
    for segment in segments:
        if segment == "..":
            if len(resolved) > keep:
                resolved.pop()
        elif segment != ".":
            resolved.append(segment)

    # A trailing dot segment still addresses a directory
    if segments[-1] in (".", ".."):
        resolved.append("")

    result = "/".join(resolved)
    if keep and not result.startswith("/"):
        result = "/" + result
    return result


# =============================================================================
# Root / path splitting
# =============================================================================


def split_root(resolved: SplitResult) -> tuple[SplitResult, str]:
    """Split a resolved reference into a backend root and a relative path.

    The relative path is the reference's path without its leading ``/`` (or
    the opaque data of a ``scheme:data`` reference), defaulting to ``"."``.
    The root keeps scheme, authority and query, with the path reset to ``/``.

    Example:
        split_root(urlsplit("consul://myhost/foo/bar?q=1"))
        # -> (consul://myhost/?q=1, "foo/bar")
    """
    name = resolved.path.removeprefix("/")
    if not name:
        name = "."
    root = resolved._replace(path="/", fragment="")
    return root, name


def root_key(root: SplitResult) -> str:
    """Render a root as a stable lookup key: ``scheme://authority/?query``."""
    key = f"{root.scheme}://{root.netloc}/"
    if root.query:
        key += f"?{root.query}"
    return key


def format_reference(ref: SplitResult) -> str:
    """Render a reference as a string.

    Unlike ``geturl()``, rooted references keep their empty authority for any
    scheme: ``aws+smp:///app/db`` rather than ``aws+smp:/app/db``.
    """
    url = ref.geturl()
    prefix = f"{ref.scheme}:"
    if ref.scheme and not ref.netloc and ref.path.startswith("/"):
        if not url.startswith(prefix + "//"):
            url = prefix + "//" + url[len(prefix):]
    return url


# =============================================================================
# Reader argument merging
# =============================================================================


def join_path(*elements: str) -> str:
    """Join non-empty path elements with ``/`` and clean the result."""
    joined = "/".join(e for e in elements if e)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def parse_datasource_url_args(
    source_url: SplitResult,
    *args: str,
    max_args: int = 2,
) -> tuple[dict[str, Any], str]:
    """Merge an optional extra path argument into a key-value datasource URL.

    Used by readers for backends addressed by logical path rather than by a
    filesystem path. The argument's path is appended to the base path, keeping
    a trailing ``/`` (directory semantics); its query parameters override the
    base's. Repeated query values are joined with a single space.

    Args:
        source_url: The datasource's base URL.
        *args: Extra arguments (at most ``max_args - 1``; the alias counts as one).
        max_args: Argument limit, including the alias.

    Returns:
        Tuple of (query parameters, logical path).

    Raises:
        TooManyArgumentsError: If too many arguments are given.
        ReferenceParseError: If the argument can't be parsed.
    """
    count = len(args) + 1
    if count > max_args:
        raise TooManyArgumentsError(source_url.scheme, max_args, count)

    path = source_url.path
    params: dict[str, Any] = {
        key: " ".join(values) for key, values in query_dict(source_url.query).items()
    }

    if args:
        parsed = parse_reference(args[0])
        if parsed.path:
            path = join_path(path, parsed.path)
            if parsed.path.endswith("/"):
                path += "/"
        for key, values in query_dict(parsed.query).items():
            params[key] = " ".join(values)

    return params, path
