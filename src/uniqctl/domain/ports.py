"""Record store contract consumed by the uniqueness checker.

The SQLAlchemy store in :mod:`uniqctl.infrastructure.store` satisfies these
protocols structurally; tests provide in-process fakes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class ObjectManager(Protocol):
    """Metadata, repository, and lazy-loading for one record type."""

    def has_field(self, name: str) -> bool: ...

    def has_association(self, name: str) -> bool: ...

    def get_repository(self) -> Any:
        """Object exposing named lookup operations ``op(criteria) -> raw result``.

        A repository may restrict which of its methods are lookups by naming
        them in a ``lookup_methods`` collection.
        """
        ...

    def initialize(self, record: Any) -> None:
        """Force a lazily-loaded record to load."""
        ...

    def identify(self, record: Any) -> Mapping[str, Any]:
        """Primary key of *record*, for diagnostics."""
        ...


class ManagerRegistry(Protocol):
    """Resolves record type names to their managers."""

    def has_record_type(self, record_type: str) -> bool: ...

    def manager_for(self, record_type: str) -> ObjectManager | None: ...
