"""Reader registry for URI scheme routing.

This module provides a registry that maps URI schemes to reader
implementations. Schemes without a backend provider are dispatched through it.
"""

from __future__ import annotations

from loguru import logger

from ..core.exceptions import StencilError, UnregisteredSchemeError
from .base import Reader


# =============================================================================
# Exceptions
# =============================================================================


class RegistryError(StencilError):
    """Base exception for registry operations."""

    pass


# =============================================================================
# Registry Implementation
# =============================================================================


class ReaderRegistry:
    """Registry that routes URI schemes to readers.

    Readers are registered at startup. The registry is sealed by the first
    lookup; after that it is read-only.

    Example:
        registry = ReaderRegistry()
        registry.register("stdin", StdinReader())
        registry.register("merge", MergeReader())

        reader = registry.lookup("stdin")
        schemes = registry.supported_schemes()  # ['merge', 'stdin']
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._readers: dict[str, Reader] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        """Whether the registry has been used and can no longer change."""
        return self._sealed

    def register(
        self,
        scheme: str,
        reader: Reader,
        *,
        override: bool = False,
    ) -> None:
        """Register a reader for a URI scheme.

        Args:
            scheme: URI scheme to handle (e.g., 'stdin', 'aws+smp').
                    Case-insensitive.
            reader: Reader handling the scheme.
            override: If True, allow replacing an existing registration.

        Raises:
            RegistryError: If the registry is sealed, or if the scheme is
                already registered and override=False.
        """
        if self._sealed:
            raise RegistryError(
                f"Can't register scheme '{scheme}': registry is already in use"
            )
        scheme_lower = scheme.lower()
        if scheme_lower in self._readers and not override:
            raise RegistryError(
                f"Scheme '{scheme}' is already registered. "
                f"Use override=True to replace."
            )
        self._readers[scheme_lower] = reader
        logger.debug(f"Registered reader: {scheme_lower!r}")

    def lookup(self, scheme: str) -> Reader:
        """Return the reader for a scheme, sealing the registry.

        Raises:
            UnregisteredSchemeError: If no reader handles the scheme.
        """
        self._sealed = True
        reader = self._readers.get(scheme.lower())
        if reader is None:
            raise UnregisteredSchemeError(scheme)
        return reader

    def is_registered(self, scheme: str) -> bool:
        """Check if a scheme is registered."""
        return scheme.lower() in self._readers

    def supported_schemes(self) -> list[str]:
        """Get sorted list of all registered schemes."""
        return sorted(self._readers.keys())


def create_default_registry() -> ReaderRegistry:
    """Create a registry with the built-in readers registered.

    Returns:
        A new, unsealed ReaderRegistry.
    """
    # Import here to avoid circular imports
    from .readers import ConsulReader, MergeReader, ParameterStoreReader, StdinReader

    registry = ReaderRegistry()
    registry.register("aws+smp", ParameterStoreReader())
    consul = ConsulReader()
    for scheme in ("consul", "consul+http", "consul+https"):
        registry.register(scheme, consul)
    registry.register("merge", MergeReader())
    registry.register("stdin", StdinReader())
    return registry
