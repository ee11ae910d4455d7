"""Tests for content decoding."""

import json
from datetime import date, datetime, timezone

import pytest

from stencil.core.exceptions import DecodeError, UnsupportedContentTypeError
from stencil.formats import parse_data, parse_map, to_json


class TestParseData:
    """Tests for parse_data."""

    def test_json_object(self):
        """JSON objects decode to dicts."""
        assert parse_data("application/json", '{"a": [1, 2], "b": null}') == {
            "a": [1, 2],
            "b": None,
        }

    def test_json_falls_back_to_array(self):
        """application/json content may be an array."""
        assert parse_data("application/json", "[1, 2, 3]") == [1, 2, 3]

    def test_json_array(self):
        """application/array+json decodes arrays only."""
        assert parse_data("application/array+json", '["a", "b"]') == ["a", "b"]

        with pytest.raises(DecodeError):
            parse_data("application/array+json", '{"a": 1}')

    def test_invalid_json(self):
        """Invalid JSON raises DecodeError with type and snippet."""
        text = '{"broken": ' + "x" * 100

        with pytest.raises(DecodeError) as exc_info:
            parse_data("application/json", text)

        assert exc_info.value.content_type == "application/json"
        assert exc_info.value.snippet == text[:40]
        assert exc_info.value.__cause__ is not None

    @pytest.mark.parametrize("value", [42, 1.5, "s", True, False, None, [], {}])
    def test_json_round_trip(self, value):
        """Encoded objects, arrays and scalars decode to an equal value."""
        assert parse_data("application/json", to_json(value)) == value

    def test_json_scalar_not_array(self):
        """application/array+json still requires an array."""
        with pytest.raises(DecodeError, match="expected a JSON array"):
            parse_data("application/array+json", "42")

    def test_yaml(self):
        """YAML mappings and sequences decode; aliases are accepted."""
        assert parse_data("application/yaml", "a: 1\nb: [x, y]\n") == {"a": 1, "b": ["x", "y"]}
        assert parse_data("application/x-yaml", "- 1\n- two\n- true\n") == [1, "two", True]

    def test_empty_yaml(self):
        """An empty YAML document is an empty mapping."""
        assert parse_data("application/yaml", "") == {}

    def test_invalid_yaml(self):
        """Invalid YAML raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            parse_data("application/yaml", "a: [unclosed")

        assert exc_info.value.content_type == "application/yaml"

    def test_csv(self):
        """CSV decodes to rows of strings."""
        assert parse_data("text/csv", "host,port\nexample.com,443\n") == [
            ["host", "port"],
            ["example.com", "443"],
        ]

    def test_csv_quoted_fields(self):
        """Quoted fields may contain separators."""
        assert parse_data("text/csv", 'a,"b,c"\n') == [["a", "b,c"]]

    def test_toml(self):
        """TOML decodes to nested dicts."""
        text = '[server]\nhost = "localhost"\nport = 8080\n'

        assert parse_data("application/toml", text) == {
            "server": {"host": "localhost", "port": 8080}
        }

    def test_invalid_toml(self):
        """Invalid TOML raises DecodeError."""
        with pytest.raises(DecodeError):
            parse_data("application/toml", "[server\n")

    def test_env(self):
        """.env content decodes to a flat mapping."""
        text = "FOO=bar\nQUOTED='hello world'\n# comment\nexport EXPORTED=yes\n"

        assert parse_data("application/x-env", text) == {
            "FOO": "bar",
            "QUOTED": "hello world",
            "EXPORTED": "yes",
        }

    def test_text(self):
        """Plain text is returned unchanged."""
        assert parse_data("text/plain", "  hello\n") == "  hello\n"
        assert parse_data("application/text", "aliased") == "aliased"

    def test_unsupported(self):
        """Unknown types raise UnsupportedContentTypeError."""
        with pytest.raises(UnsupportedContentTypeError) as exc_info:
            parse_data("image/png", "...")

        assert exc_info.value.content_type == "image/png"
        assert "image/png not yet supported" in str(exc_info.value)


class TestParseMap:
    """Tests for parse_map."""

    def test_mapping(self):
        """Mappings pass through."""
        assert parse_map("application/yaml", "a: 1") == {"a": 1}

    def test_non_mapping(self):
        """Arrays and text are rejected."""
        with pytest.raises(DecodeError, match="expected a mapping"):
            parse_map("application/json", "[1]")

        with pytest.raises(DecodeError):
            parse_map("text/plain", "hello")


class TestToJSON:
    """Tests for to_json."""

    def test_compact(self):
        """Output is compact by default."""
        assert to_json({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_indent(self):
        """Output can be indented."""
        assert to_json({"a": 1}, indent=2) == '{\n  "a": 1\n}'

    def test_datetimes(self):
        """Dates and datetimes are ISO-8601 strings."""
        value = {
            "when": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            "day": date(2024, 1, 2),
        }

        assert json.loads(to_json(value)) == {
            "when": "2024-01-02T03:04:05+00:00",
            "day": "2024-01-02",
        }

    def test_round_trip(self):
        """Structured values survive encoding and decoding."""
        value = {"s": "text", "n": 1.5, "b": False, "z": None, "l": [1, {"x": "y"}]}

        assert parse_data("application/json", to_json(value)) == value

    def test_unserializable(self):
        """Unknown types still fail."""
        with pytest.raises(TypeError):
            to_json({"x": object()})
