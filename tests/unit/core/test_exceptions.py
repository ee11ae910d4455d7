"""Tests for the exception hierarchy."""

from stencil.core.exceptions import (
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


class TestDataSourceError:
    """Tests for DataSourceError context handling."""

    def test_message_only(self):
        """Without context, str is the message."""
        assert str(DataSourceError("boom")) == "boom"

    def test_with_context(self):
        """Context is rendered after the message."""
        error = DataSourceError("boom").with_context("data", "file:///tmp/data.json")

        assert error.alias == "data"
        assert error.reference == "file:///tmp/data.json"
        assert str(error) == "boom (datasource 'data', url: file:///tmp/data.json)"

    def test_with_context_keeps_existing(self):
        """Context set closer to the failure is not replaced."""
        error = DataSourceError("boom", alias="inner")

        error.with_context("outer", "http://example.com/")

        assert error.alias == "inner"
        assert error.reference == "http://example.com/"

    def test_with_context_returns_self(self):
        """with_context returns the same error, so the type is kept."""
        error = UndefinedAliasError("x")

        assert error.with_context("y") is error


class TestErrorTypes:
    """Tests for error attributes and messages."""

    def test_hierarchy(self):
        """All datasource errors share StencilError as their base."""
        for error in (
            ReferenceParseError("x", "bad"),
            InvalidMediaTypeError("a/b/c", "bad"),
            UndefinedAliasError("x"),
            UnregisteredSchemeError("gopher"),
            TooManyArgumentsError("aws+smp", 2, 3),
            UnsupportedContentTypeError("image/png"),
            BackendFetchError("down"),
            DecodeError("application/json", "{", "bad"),
        ):
            assert isinstance(error, DataSourceError)
            assert isinstance(error, StencilError)
        assert isinstance(ConfigError("x"), StencilError)
        assert not isinstance(ConfigError("x"), DataSourceError)

    def test_undefined_alias(self):
        """UndefinedAliasError names the alias."""
        error = UndefinedAliasError("missing")

        assert error.alias == "missing"
        assert str(error) == "Undefined datasource 'missing'"

    def test_too_many_arguments(self):
        """The count includes the alias."""
        error = TooManyArgumentsError("aws+smp", 2, 3)

        assert str(error) == (
            "maximum 2 arguments to aws+smp datasource: alias, extraPath (found 3)"
        )

    def test_decode_error(self):
        """DecodeError carries type, snippet and reason."""
        error = DecodeError("application/yaml", "a: [", "unexpected end")

        assert error.content_type == "application/yaml"
        assert error.snippet == "a: ["
        assert error.reason == "unexpected end"
        assert "application/yaml" in str(error)

    def test_backend_fetch_error(self):
        """BackendFetchError keeps reason and context."""
        error = BackendFetchError("timed out", alias="api", reference="https://x/")

        assert error.reason == "timed out"
        assert str(error) == "timed out (datasource 'api', url: https://x/)"
