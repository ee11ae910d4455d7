"""Tests for configuration loading and datasource flags."""

import os

import pytest

from stencil.core.config import (
    Config,
    DataSourceConfig,
    canonical_header_name,
    parse_datasource_arg,
    parse_header_arg,
)
from stencil.core.exceptions import ConfigError


class TestConfigFromEnv:
    """Tests for Config.from_env."""

    def test_defaults(self, monkeypatch):
        """Without environment variables the defaults apply."""
        monkeypatch.delenv("STENCIL_HTTP_TIMEOUT", raising=False)
        monkeypatch.delenv("STENCIL_USER_AGENT", raising=False)

        config = Config.from_env()

        assert config.http.timeout == 30.0
        assert config.http.user_agent == "stencil/1.0"
        assert config.datasources == {}

    def test_http_settings(self, monkeypatch):
        """HTTP settings come from the environment."""
        monkeypatch.setenv("STENCIL_HTTP_TIMEOUT", "5")
        monkeypatch.setenv("STENCIL_USER_AGENT", "custom/2.0")

        config = Config.from_env()

        assert config.http.timeout == 5.0
        assert config.http.user_agent == "custom/2.0"

    def test_invalid_timeout(self, monkeypatch):
        """A non-numeric timeout is a config error."""
        monkeypatch.setenv("STENCIL_HTTP_TIMEOUT", "soon")

        with pytest.raises(ConfigError, match="STENCIL_HTTP_TIMEOUT"):
            Config.from_env()


class TestConfigFromFile:
    """Tests for Config.from_file."""

    def test_loads_datasources(self, tmp_path, monkeypatch):
        """Datasources, contexts and headers are read from YAML."""
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "stencil.yaml"
        path.write_text(
            "datasources:\n"
            "  config: config.json\n"
            "  api:\n"
            "    url: https://api.example.com/v1/\n"
            "    header:\n"
            "      authorization: Bearer abc\n"
            "context:\n"
            "  env: env:///\n"
            "headers:\n"
            "  later:\n"
            "    x-token: [one, two]\n"
        )

        config = Config.from_file(path)

        assert config.datasources["config"].url.path == f"{os.getcwd()}/config.json"
        assert config.datasources["api"].url.netloc == "api.example.com"
        assert config.datasources["api"].header == {"Authorization": ["Bearer abc"]}
        assert config.context["env"].url.scheme == "env"
        assert config.extra_headers == {"later": {"X-Token": ["one", "two"]}}

    def test_missing_file(self, tmp_path):
        """An unreadable file is a config error."""
        with pytest.raises(ConfigError, match="couldn't read"):
            Config.from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Malformed YAML is a config error."""
        path = tmp_path / "bad.yaml"
        path.write_text("datasources: [unclosed\n")

        with pytest.raises(ConfigError, match="invalid YAML"):
            Config.from_file(path)

    def test_entry_without_url(self, tmp_path):
        """Datasource entries need a URL."""
        path = tmp_path / "bad.yaml"
        path.write_text("datasources:\n  broken:\n    header: {}\n")

        with pytest.raises(ConfigError, match="broken"):
            Config.from_file(path)


class TestDatasourceFlags:
    """Tests for parse_datasource_arg, parse_header_arg and parse_datasource_flags."""

    def test_alias_and_url(self):
        """alias=url binds the alias."""
        alias, url = parse_datasource_arg("data=https://example.com/data.json")

        assert alias == "data"
        assert url.geturl() == "https://example.com/data.json"

    def test_alias_from_file_name(self, tmp_path, monkeypatch):
        """Without an alias, the file's base name is used."""
        monkeypatch.chdir(tmp_path)

        alias, url = parse_datasource_arg("configs/settings.yaml")

        assert alias == "settings"
        assert url.scheme == "file"

    def test_empty_alias(self):
        """An empty alias is an error."""
        with pytest.raises(ConfigError):
            parse_datasource_arg("=https://example.com/")

    def test_invalid_url(self):
        """An unparseable URL is a config error."""
        with pytest.raises(ConfigError, match="invalid datasource URL"):
            parse_datasource_arg("bad=http://example.com:port/")

    def test_header(self):
        """Header flags are split and the name canonicalized."""
        assert parse_header_arg("api=authorization: Bearer abc") == (
            "api",
            "Authorization",
            "Bearer abc",
        )

    @pytest.mark.parametrize("value", ["no-equals", "api=no-colon", "=Name: value", "api=: x"])
    def test_malformed_header(self, value):
        """Malformed header flags are config errors."""
        with pytest.raises(ConfigError):
            parse_header_arg(value)

    def test_canonical_header_name(self):
        """Each dash-separated part is capitalized."""
        assert canonical_header_name("x-api-KEY") == "X-Api-Key"

    def test_flags_attach_headers(self):
        """Headers attach to flag-defined datasources; others are kept aside."""
        config = Config()

        config.parse_datasource_flags(
            datasources=["api=https://api.example.com/"],
            contexts=["ctx=https://ctx.example.com/"],
            headers=[
                "api=Authorization: Bearer abc",
                "api=Accept: application/json",
                "api=Accept: text/plain",
                "later=X-Token: t",
            ],
        )

        assert config.datasources["api"].header == {
            "Authorization": ["Bearer abc"],
            "Accept": ["application/json", "text/plain"],
        }
        assert config.context["ctx"].header == {}
        assert config.extra_headers == {"later": {"X-Token": ["t"]}}

    def test_datasource_config_defaults(self):
        """DataSourceConfig headers default to empty."""
        _, url = parse_datasource_arg("x=https://example.com/")

        assert DataSourceConfig(url=url).header == {}
