"""uniqctl — application-level uniqueness checks over a record store.

Library entry points::

    from uniqctl import UniqueRule, UniquenessChecker

    checker = UniquenessChecker.from_registry(
        UniqueRule(record_type="users", fields=["email"]), store
    )
    verdict = checker.check(user)
"""

from __future__ import annotations

from uniqctl.domain.errors import InvalidRuleDefinition
from uniqctl.domain.rules import UniqueRule
from uniqctl.domain.verdict import Verdict, Violation
from uniqctl.services.checker import UniquenessChecker, check_unique

__version__ = "0.3.0"

__all__ = [
    "InvalidRuleDefinition",
    "UniqueRule",
    "UniquenessChecker",
    "Verdict",
    "Violation",
    "__version__",
    "check_unique",
]
