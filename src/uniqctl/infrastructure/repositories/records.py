"""Read-only repository for one mapped record class.

Lookups take a criteria mapping of attribute name to value. Only the
methods named in ``SqlRecordRepository.lookup_methods`` may serve as a
rule's ``lookup_method``; ``count_by`` answers with a number, not records.
Association attributes compare by the related record's primary key, as
``filter_by`` does.

Lookups run with autoflush disabled: a pending candidate must never be
written as a side effect of checking it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, ClassVar

from sqlalchemy import func, select
from sqlalchemy.engine import ScalarResult
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select


class RecordCursor(Iterator[Any]):
    """Forward-only cursor over matching records that knows its match count."""

    def __init__(self, rows: ScalarResult[Any], count: int) -> None:
        self._rows = rows
        self._count = count
        self._closed = False

    def __len__(self) -> int:
        return self._count

    def __next__(self) -> Any:
        return next(self._rows)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._rows.close()
            self._closed = True


class SqlRecordRepository:
    """Encapsulates lookups for one mapped class."""

    lookup_methods: ClassVar[frozenset[str]] = frozenset({"find_by", "find_one_by", "iterate_by"})

    def __init__(self, session: Session, entity: type) -> None:
        self._session = session
        self._entity = entity

    @property
    def entity(self) -> type:
        return self._entity

    def _select(self, criteria: Mapping[str, Any]) -> Select[Any]:
        return select(self._entity).filter_by(**criteria)

    def find_by(self, criteria: Mapping[str, Any]) -> list[Any]:
        """All records matching *criteria*."""
        with self._session.no_autoflush:
            return list(self._session.scalars(self._select(criteria)).all())

    def find_one_by(self, criteria: Mapping[str, Any]) -> Any | None:
        """First record matching *criteria*, or None."""
        with self._session.no_autoflush:
            return self._session.scalars(self._select(criteria).limit(1)).first()

    def count_by(self, criteria: Mapping[str, Any]) -> int:
        """Number of records matching *criteria*."""
        stmt = select(func.count()).select_from(self._select(criteria).subquery())
        with self._session.no_autoflush:
            return int(self._session.execute(stmt).scalar_one() or 0)

    def iterate_by(self, criteria: Mapping[str, Any]) -> RecordCursor:
        """Cursor over records matching *criteria*, rows fetched on demand."""
        count = self.count_by(criteria)
        with self._session.no_autoflush:
            rows = self._session.scalars(
                self._select(criteria).execution_options(yield_per=100)
            )
        return RecordCursor(rows, count)
