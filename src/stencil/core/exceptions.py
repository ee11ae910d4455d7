"""Custom exceptions for stencil."""

from __future__ import annotations


class StencilError(Exception):
    """Base exception for all stencil errors."""

    pass


class ConfigError(StencilError):
    """Invalid configuration or command-line flag."""

    pass


class DataSourceError(StencilError):
    """Datasource operation failed.

    Carries the alias and reference being read, when known. Context is filled
    in as the error crosses layer boundaries, without replacing the error type.

    Attributes:
        message: Description of the failure.
        alias: Alias of the datasource being read.
        reference: Reference (URL) being read.
    """

    def __init__(
        self,
        message: str,
        *,
        alias: str | None = None,
        reference: str | None = None,
    ):
        self.message = message
        self.alias = alias
        self.reference = reference
        super().__init__(message)

    def with_context(
        self,
        alias: str | None = None,
        reference: str | None = None,
    ) -> "DataSourceError":
        """Fill in missing context and return self (for re-raising)."""
        if self.alias is None:
            self.alias = alias
        if self.reference is None:
            self.reference = reference
        return self

    def __str__(self) -> str:
        context = []
        if self.alias is not None:
            context.append(f"datasource '{self.alias}'")
        if self.reference is not None:
            context.append(f"url: {self.reference}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ReferenceParseError(DataSourceError):
    """A reference (URL) could not be parsed."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"couldn't parse reference {value!r}: {reason}")


class InvalidMediaTypeError(DataSourceError):
    """A media type candidate is malformed."""

    def __init__(self, media_type: str, reason: str):
        self.media_type = media_type
        self.reason = reason
        super().__init__(f"invalid media type {media_type!r}: {reason}")


class UndefinedAliasError(DataSourceError):
    """Alias is not defined and is not an absolute URL."""

    def __init__(self, alias: str):
        super().__init__(f"Undefined datasource '{alias}'", alias=alias)

    def __str__(self) -> str:
        return self.message


class UnregisteredSchemeError(DataSourceError):
    """No reader is registered for a scheme."""

    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(f"scheme {scheme} not registered")


class TooManyArgumentsError(DataSourceError):
    """A reader received more arguments than it accepts.

    The count includes the alias, so a reader accepting an alias plus one
    extra path has a limit of 2.
    """

    def __init__(self, scheme: str, limit: int, count: int):
        self.scheme = scheme
        self.limit = limit
        self.count = count
        super().__init__(
            f"maximum {limit} arguments to {scheme} datasource: "
            f"alias, extraPath (found {count})"
        )


class UnsupportedContentTypeError(DataSourceError):
    """No decoder exists for the content type."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Datasources of type {content_type} not yet supported")


class BackendFetchError(DataSourceError):
    """A provider or reader failed to fetch content.

    Raised ``from`` the underlying exception so the cause is preserved.
    """

    def __init__(
        self,
        reason: str,
        *,
        alias: str | None = None,
        reference: str | None = None,
    ):
        self.reason = reason
        super().__init__(reason, alias=alias, reference=reference)


class DecodeError(DataSourceError):
    """Content could not be decoded as its content type."""

    def __init__(self, content_type: str, snippet: str, reason: str):
        self.content_type = content_type
        self.snippet = snippet
        self.reason = reason
        super().__init__(
            f"failed to decode {content_type} content starting {snippet!r}: {reason}"
        )
