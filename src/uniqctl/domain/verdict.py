"""Verdict — outcome of one uniqueness check.

A failing verdict is an ordinary return value. Callers decide how to
present it; nothing in the checker raises for non-unique data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from uniqctl.domain.rules import IS_NOT_UNIQUE


class Violation(BaseModel):
    """Failure detail attached to a failing :class:`Verdict`.

    Attributes:
        code: Machine-readable violation code.
        message: Message from the rule.
        path: Field the failure is attributed to.
        invalid_value: Candidate value for *path*.
        cause: Conflicting records returned by the lookup.
    """

    model_config = {"frozen": True}

    code: str = IS_NOT_UNIQUE
    message: str
    path: str
    invalid_value: Any = None
    cause: tuple[Any, ...] = ()


class Verdict(BaseModel):
    """Pass, or fail with a :class:`Violation`."""

    model_config = {"frozen": True}

    ok: bool
    violation: Violation | None = None

    @classmethod
    def passed(cls) -> Verdict:
        return cls(ok=True)

    @classmethod
    def failed(
        cls,
        *,
        message: str,
        path: str,
        invalid_value: Any,
        cause: tuple[Any, ...],
    ) -> Verdict:
        violation = Violation(
            message=message,
            path=path,
            invalid_value=invalid_value,
            cause=cause,
        )
        return cls(ok=False, violation=violation)
