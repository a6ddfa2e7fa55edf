"""Domain layer — rules, verdicts, and the record store contract.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

from uniqctl.domain.errors import InvalidRuleDefinition
from uniqctl.domain.results import EMPTY, Empty, Many, QueryResult, Single, normalize_result
from uniqctl.domain.rules import DEFAULT_LOOKUP_METHOD, DEFAULT_MESSAGE, IS_NOT_UNIQUE, UniqueRule
from uniqctl.domain.verdict import Verdict, Violation

__all__ = [
    "DEFAULT_LOOKUP_METHOD",
    "DEFAULT_MESSAGE",
    "EMPTY",
    "Empty",
    "IS_NOT_UNIQUE",
    "InvalidRuleDefinition",
    "Many",
    "QueryResult",
    "Single",
    "UniqueRule",
    "Verdict",
    "Violation",
    "normalize_result",
]
