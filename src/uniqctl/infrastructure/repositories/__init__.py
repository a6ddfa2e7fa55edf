"""Read-side repositories over mapped record classes."""

from uniqctl.infrastructure.repositories.records import RecordCursor, SqlRecordRepository

__all__ = ["RecordCursor", "SqlRecordRepository"]
