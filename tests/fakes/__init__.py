"""Test fakes for testing without real backends.

This module provides in-memory implementations of:
- Readers (for testing dispatch and caching)
- An SSM client (for testing the parameter store reader without AWS)

Example:
    from tests.fakes import CountingReader, FakeSSMClient

    reader = CountingReader(b'{"a": 1}', "application/json")
    registry = ReaderRegistry()
    registry.register("stub", reader)
"""

from .readers import CountingReader, FailingReader, SlowReader
from .ssm import FakeSSMClient, ParameterNotFound

__all__ = [
    "CountingReader",
    "FailingReader",
    "FakeSSMClient",
    "ParameterNotFound",
    "SlowReader",
]
