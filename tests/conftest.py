"""Pytest configuration and fixtures."""

import io
from pathlib import Path

import pytest

from stencil.core.config import Config


@pytest.fixture
def config() -> Config:
    """Provide a Config with an empty input stream."""
    return Config(stdin=io.BytesIO(b""))


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide a directory of datasource files in several formats."""
    (tmp_path / "config.json").write_text('{"name": "app", "port": 8080}')
    (tmp_path / "config.yaml").write_text("name: app\nfeatures:\n  - a\n  - b\n")
    (tmp_path / "hosts.csv").write_text("host,port\nexample.com,443\n")
    (tmp_path / "settings.toml").write_text('[server]\nhost = "localhost"\n')
    (tmp_path / "app.env").write_text("FOO=bar\nEMPTY=\n")
    (tmp_path / "notes").write_text("plain text")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "b.json").write_text("{}")
    (nested / "a.json").write_text("[]")
    return tmp_path
