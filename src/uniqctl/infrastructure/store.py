"""SqlRecordStore — record types, managers, and lookups over SQLAlchemy ORM.

The store owns one ORM :class:`~sqlalchemy.orm.Session`. Its identity map
guarantees that a record loaded twice within the store is the same Python
object, which is what lets the checker recognise a candidate that finds
itself.

Record types are named either explicitly (``types={"users": User}``) or by
reflecting the database with automap, in which case each table becomes a
record type named after the table and foreign keys become associations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect
from sqlalchemy.ext.automap import automap_base
from sqlalchemy.orm import Mapper, Session

from uniqctl.infrastructure.repositories.records import SqlRecordRepository

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class SqlObjectManager:
    """Metadata, repository, and loading for one mapped class."""

    def __init__(self, session: Session, entity: type, mapper: Mapper[Any]) -> None:
        self._session = session
        self._entity = entity
        self._mapper = mapper

    @property
    def entity(self) -> type:
        return self._entity

    def has_field(self, name: str) -> bool:
        return name in self._mapper.column_attrs

    def has_association(self, name: str) -> bool:
        return name in self._mapper.relationships

    def get_repository(self) -> SqlRecordRepository:
        return SqlRecordRepository(self._session, self._entity)

    def initialize(self, record: Any) -> None:
        """Load expired attributes of a persistent *record*."""
        state = inspect(record)
        if state.persistent and state.expired_attributes:
            self._session.refresh(record)

    def identify(self, record: Any) -> dict[str, Any]:
        """Primary key columns of *record*; empty for unsaved records."""
        state = inspect(record)
        if state.identity is None:
            return {}
        mapper = state.mapper
        keys = [mapper.get_property_by_column(col).key for col in mapper.primary_key]
        return dict(zip(keys, state.identity, strict=True))

    def load(self, primary_key: Any) -> Any | None:
        """Fetch a persisted record by primary key (text keys are converted)."""
        return self._session.get(self._entity, _key_for(self._mapper, primary_key))

    def build(self, values: Mapping[str, Any]) -> Any:
        """Create a transient record from *values*.

        Association values are primary keys of the related record and are
        replaced by the loaded record. Unknown attribute names raise
        ``KeyError``.
        """
        record = self._entity()
        return self.apply(record, values)

    def apply(self, record: Any, values: Mapping[str, Any]) -> Any:
        """Overlay *values* on an existing record (not flushed)."""
        with self._session.no_autoflush:
            for name, value in values.items():
                setattr(record, name, self._coerce(name, value))
        return record

    def _coerce(self, name: str, value: Any) -> Any:
        if self.has_association(name):
            if value is None:
                return None
            relationship = self._mapper.relationships[name]
            target = relationship.mapper.class_
            related = self._session.get(target, _key_for(relationship.mapper, value))
            if related is None:
                msg = f"No {target.__name__} with primary key {value!r} for {name!r}"
                raise KeyError(msg)
            return related
        if not self.has_field(name):
            msg = f"{self._entity.__name__} has no attribute {name!r}"
            raise KeyError(msg)
        return _from_text(self._mapper.column_attrs[name].columns[0], value)


class SqlRecordStore:
    """Registry of record types backed by one ORM session.

    Usage::

        store = SqlRecordStore(engine, types={"users": User})
        manager = store.manager_for("users")
        ...
        store.close()
    """

    def __init__(self, engine: Engine, types: Mapping[str, type] | None = None) -> None:
        self._engine = engine
        self._types: dict[str, type] = dict(types or {})
        self._session = Session(engine, expire_on_commit=False)

    @classmethod
    def reflect(cls, engine: Engine) -> SqlRecordStore:
        """Build a store whose record types are the reflected tables of *engine*."""
        base = automap_base()
        base.prepare(autoload_with=engine)
        types = {name: mapped for name, mapped in base.classes.items()}
        logger.debug("Reflected %d record types", len(types))
        return cls(engine, types)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def session(self) -> Session:
        return self._session

    @property
    def record_types(self) -> list[str]:
        return sorted(self._types)

    def register(self, record_type: str, entity: type) -> None:
        self._types[record_type] = entity

    def has_record_type(self, record_type: str) -> bool:
        return record_type in self._types

    def manager_for(self, record_type: str) -> SqlObjectManager | None:
        """Manager for *record_type*, or None when its class is not mapped."""
        entity = self._types.get(record_type)
        if entity is None:
            return None
        mapper = inspect(entity, raiseerr=False)
        if mapper is None:
            return None
        return SqlObjectManager(self._session, entity, mapper)

    def close(self) -> None:
        """Discard pending changes and release the connection."""
        self._session.rollback()
        self._session.close()


def _from_text(column: Any, value: Any) -> Any:
    """Convert a command-line string to the column's Python type when possible."""
    if not isinstance(value, str):
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type is str:
        return value
    if python_type is bool:
        return value.strip().lower() in ("1", "true", "yes", "on")
    try:
        return python_type(value)
    except (TypeError, ValueError):
        return value


def _key_for(mapper: Mapper[Any], value: Any) -> Any:
    if len(mapper.primary_key) != 1:
        return value
    return _from_text(mapper.primary_key[0], value)
