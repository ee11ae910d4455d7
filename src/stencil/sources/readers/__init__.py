"""Readers for schemes that aren't served by a backend provider."""

from .consul import ConsulReader
from .merge import MergeReader, deep_merge
from .param_store import ParameterStoreReader
from .stdin import StdinBuffer, StdinReader

__all__ = [
    "ConsulReader",
    "MergeReader",
    "ParameterStoreReader",
    "StdinBuffer",
    "StdinReader",
    "deep_merge",
]
