"""Tests for ReaderRegistry."""

import pytest

from stencil.core.exceptions import UnregisteredSchemeError
from stencil.sources import Reader, ReaderRegistry, RegistryError, create_default_registry
from stencil.sources.readers import ConsulReader, MergeReader, ParameterStoreReader, StdinReader

from tests.fakes import CountingReader


class TestReaderRegistry:
    """Tests for ReaderRegistry."""

    def test_register_and_lookup(self):
        """Can register a reader and look it up by scheme."""
        registry = ReaderRegistry()
        reader = CountingReader()
        registry.register("stub", reader)

        assert registry.lookup("stub") is reader

    def test_register_case_insensitive(self):
        """Scheme registration is case-insensitive."""
        registry = ReaderRegistry()
        reader = CountingReader()
        registry.register("STUB", reader)

        assert registry.lookup("stub") is reader
        assert registry.is_registered("Stub")

    def test_register_duplicate_raises(self):
        """Registering a duplicate scheme raises error."""
        registry = ReaderRegistry()
        registry.register("stub", CountingReader())

        with pytest.raises(RegistryError, match="already registered"):
            registry.register("stub", CountingReader())

    def test_register_override(self):
        """Can override an existing registration."""
        registry = ReaderRegistry()
        registry.register("stub", CountingReader())
        replacement = CountingReader()
        registry.register("stub", replacement, override=True)

        assert registry.lookup("stub") is replacement

    def test_lookup_unregistered(self):
        """Looking up an unknown scheme raises UnregisteredSchemeError."""
        registry = ReaderRegistry()

        with pytest.raises(UnregisteredSchemeError) as exc_info:
            registry.lookup("gopher")

        assert exc_info.value.scheme == "gopher"
        assert str(exc_info.value) == "scheme gopher not registered"

    def test_sealed_after_lookup(self):
        """The first lookup seals the registry."""
        registry = ReaderRegistry()
        registry.register("stub", CountingReader())
        assert not registry.sealed

        registry.lookup("stub")

        assert registry.sealed
        with pytest.raises(RegistryError, match="already in use"):
            registry.register("other", CountingReader())

    def test_failed_lookup_also_seals(self):
        """Even a failed lookup seals the registry."""
        registry = ReaderRegistry()

        with pytest.raises(UnregisteredSchemeError):
            registry.lookup("nope")

        assert registry.sealed

    def test_supported_schemes(self):
        """supported_schemes lists registered schemes sorted."""
        registry = ReaderRegistry()
        registry.register("zeta", CountingReader())
        registry.register("alpha", CountingReader())

        assert registry.supported_schemes() == ["alpha", "zeta"]


class TestDefaultRegistry:
    """Tests for create_default_registry."""

    def test_builtin_readers(self):
        """The default registry has the built-in readers."""
        registry = create_default_registry()

        assert registry.supported_schemes() == [
            "aws+smp",
            "consul",
            "consul+http",
            "consul+https",
            "merge",
            "stdin",
        ]
        assert isinstance(registry.lookup("aws+smp"), ParameterStoreReader)
        assert isinstance(registry.lookup("consul+https"), ConsulReader)
        assert registry.lookup("consul") is registry.lookup("consul+http")
        assert isinstance(registry.lookup("merge"), MergeReader)
        assert isinstance(registry.lookup("stdin"), StdinReader)

    def test_builtin_readers_satisfy_protocol(self):
        """Built-in readers implement the Reader protocol."""
        registry = create_default_registry()

        for scheme in registry.supported_schemes():
            assert isinstance(registry.lookup(scheme), Reader)

    def test_new_registry_each_call(self):
        """Each call returns an independent, unsealed registry."""
        first = create_default_registry()
        first.lookup("stdin")

        second = create_default_registry()

        assert not second.sealed
