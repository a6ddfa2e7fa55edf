"""Reading candidate field values by name.

A record type may expose ``get<Field>()`` getters, plain attributes, or be a
mapping. Mapping keys are read strictly: a missing key raises ``KeyError``
rather than reading as None, which ``ignore_null`` would silently pass.
:class:`FieldReader` decides once per candidate class which of the
three applies to each field and caches that decision, so repeated checks of
the same record type skip the lookup.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

Accessor = Callable[[Any], Any]


@runtime_checkable
class FieldReadable(Protocol):
    """Records that resolve their own field values."""

    def read_field(self, name: str) -> Any: ...


def getter_name(field: str) -> str:
    """``email`` -> ``getEmail``."""
    return "get" + field[:1].upper() + field[1:]


def resolve_accessor(record_cls: type, field: str) -> Accessor:
    """Return a callable that reads *field* from instances of *record_cls*."""
    if issubclass(record_cls, FieldReadable):
        return operator.methodcaller("read_field", field)
    if issubclass(record_cls, Mapping):
        return operator.itemgetter(field)
    getter = getattr(record_cls, getter_name(field), None)
    if callable(getter):
        return operator.methodcaller(getter_name(field))
    return operator.attrgetter(field)


class FieldReader:
    """Reads a fixed list of fields, caching accessors per record class."""

    def __init__(self, fields: tuple[str, ...]) -> None:
        self._fields = fields
        self._cache: dict[type, tuple[Accessor, ...]] = {}

    def read(self, record: Any) -> list[tuple[str, Any]]:
        """Return ``(field, value)`` pairs in field order."""
        record_cls = type(record)
        accessors = self._cache.get(record_cls)
        if accessors is None:
            accessors = tuple(resolve_accessor(record_cls, f) for f in self._fields)
            self._cache[record_cls] = accessors
        return [(f, read(record)) for f, read in zip(self._fields, accessors, strict=True)]
