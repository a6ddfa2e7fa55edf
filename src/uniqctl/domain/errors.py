"""Configuration errors raised while binding a uniqueness rule.

A broken rule is a programmer mistake, not a data problem: these errors
propagate to the caller untouched. A record that is not unique is reported
through :class:`~uniqctl.domain.verdict.Verdict`, never raised.
"""

from __future__ import annotations


class InvalidRuleDefinition(Exception):
    """Raised when a :class:`UniqueRule` cannot be checked against its store.

    Attributes:
        record_type: Record type named by the offending rule, when known.
    """

    def __init__(self, message: str, *, record_type: str | None = None) -> None:
        self.record_type = record_type
        super().__init__(message)
