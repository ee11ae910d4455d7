"""Pytest configuration and fixtures for the read pipeline tests."""

import pytest

from stencil.core.config import Config
from stencil.services import Data
from stencil.sources import ReaderRegistry

from tests.fakes import CountingReader


@pytest.fixture
def stub_reader() -> CountingReader:
    """Provide a reader returning a JSON object."""
    return CountingReader(b'{"stub": true}')


@pytest.fixture
def stub_data(config: Config, stub_reader: CountingReader) -> Data:
    """Provide a Data instance with a 'stub' scheme reader and a 'stub' datasource."""
    registry = ReaderRegistry()
    registry.register("stub", stub_reader)
    data = Data(config, readers=registry)
    data.define_datasource("stub", "stub:///thing.json")
    return data
