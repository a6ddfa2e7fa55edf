"""QueryResult — normalized shape of a repository lookup.

Repositories may answer a lookup with a single record (or None), a plain
sequence, or a forward-only cursor. :func:`normalize_result` folds all three
into one of :class:`Empty`, :class:`Single`, or :class:`Many` so the
interpreter never sniffs shapes.

INVARIANT: a cursor is never advanced past its second element.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence, Sized
from dataclasses import dataclass
from itertools import islice
from typing import Any


@dataclass(frozen=True)
class Empty:
    """No record matched the criteria."""

    @property
    def records(self) -> tuple[Any, ...]:
        return ()


@dataclass(frozen=True)
class Single:
    """Exactly one record came back."""

    record: Any

    @property
    def records(self) -> tuple[Any, ...]:
        return (self.record,)


@dataclass(frozen=True)
class Many:
    """Several records came back (or a sequence of any length > 0)."""

    items: tuple[Any, ...]

    @property
    def records(self) -> tuple[Any, ...]:
        return self.items


QueryResult = Empty | Single | Many

EMPTY = Empty()


def normalize_result(raw: Any) -> QueryResult:
    """Convert a raw repository answer into a :data:`QueryResult`."""
    if raw is None:
        return EMPTY
    if isinstance(raw, Iterator):
        return _from_cursor(raw)
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) == 0:
            return EMPTY
        return Many(tuple(raw))
    return Single(raw)


def _from_cursor(cursor: Iterator[Any]) -> QueryResult:
    # Two records prove a conflict; never drain a large cursor.
    if isinstance(cursor, Sized) and len(cursor) > 1:
        return Many(tuple(islice(cursor, 2)))
    first = next(cursor, None)
    if first is None:
        return EMPTY
    return Single(first)


def is_only(result: QueryResult, candidate: Any) -> bool:
    """Whether *result* holds exactly one record and it is *candidate* itself."""
    records = result.records
    return len(records) == 1 and records[0] is candidate
