"""UniquenessChecker — decide whether a candidate record is unique.

Pipeline for one call::

    candidate --(FieldReader)--> criteria --(repository.<lookup_method>)-->
    raw result --(normalize_result)--> QueryResult --(interpret)--> Verdict

Binding a checker validates the rule against its manager once; a broken rule
raises :class:`InvalidRuleDefinition` before any candidate is seen.

INVARIANT: at most one repository call per :meth:`UniquenessChecker.check`.
INVARIANT: a non-unique candidate yields a failing Verdict, never an exception.

This is a read-then-decide check. A concurrent writer can still insert a
conflicting record between the lookup and the caller's own write; only a
storage-level unique constraint closes that window.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from uniqctl.domain.errors import InvalidRuleDefinition
from uniqctl.domain.records import FieldReader
from uniqctl.domain.results import QueryResult, is_only, normalize_result
from uniqctl.domain.verdict import Verdict

if TYPE_CHECKING:
    from collections.abc import Callable

    from uniqctl.domain.ports import ManagerRegistry, ObjectManager
    from uniqctl.domain.rules import UniqueRule

logger = logging.getLogger(__name__)


def resolve_manager(rule: UniqueRule, registry: ManagerRegistry) -> ObjectManager:
    """Find the manager for ``rule.record_type`` or raise InvalidRuleDefinition."""
    if not rule.fields:
        msg = "At least one field has to be specified."
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)
    if not registry.has_record_type(rule.record_type):
        msg = f'Record type "{rule.record_type}" does not exist.'
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)
    manager = registry.manager_for(rule.record_type)
    if manager is None:
        msg = (
            "Unable to find the object manager associated with "
            f'record type "{rule.record_type}".'
        )
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)
    return manager


def validate_rule(rule: UniqueRule, manager: ObjectManager) -> Callable[[Any], Any]:
    """Check *rule* against *manager* metadata; return the bound lookup operation."""
    if not rule.fields:
        msg = "At least one field has to be specified."
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)

    for field in rule.fields:
        if not manager.has_field(field) and not manager.has_association(field):
            msg = (
                f'The field "{field}" is not mapped on "{rule.record_type}", '
                "so it cannot be validated for uniqueness."
            )
            raise InvalidRuleDefinition(msg, record_type=rule.record_type)

    if rule.error_path is not None and rule.error_path not in rule.fields:
        msg = (
            f'The error path "{rule.error_path}" must be one of the checked '
            f"fields {list(rule.fields)}."
        )
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)

    repository = manager.get_repository()
    allowed = getattr(repository, "lookup_methods", None)
    if allowed is not None and rule.lookup_method not in allowed:
        msg = (
            f'"{rule.lookup_method}" is not a lookup operation of repository '
            f'"{type(repository).__name__}"; expected one of {sorted(allowed)}.'
        )
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)

    lookup = None
    if not rule.lookup_method.startswith("_"):
        lookup = getattr(repository, rule.lookup_method, None)
    if not callable(lookup):
        msg = (
            f'Repository "{type(repository).__name__}" does not have '
            f'"{rule.lookup_method}" method.'
        )
        raise InvalidRuleDefinition(msg, record_type=rule.record_type)
    return lookup


class UniquenessChecker:
    """A :class:`UniqueRule` bound to the manager of its record type.

    Usage::

        checker = UniquenessChecker.from_registry(rule, store)
        verdict = checker.check(user)
        if not verdict.ok:
            ...
    """

    def __init__(self, rule: UniqueRule, manager: ObjectManager) -> None:
        self._lookup = validate_rule(rule, manager)
        self._rule = rule
        self._manager = manager
        self._reader = FieldReader(rule.fields)

    @classmethod
    def from_registry(cls, rule: UniqueRule, registry: ManagerRegistry) -> UniquenessChecker:
        return cls(rule, resolve_manager(rule, registry))

    @property
    def rule(self) -> UniqueRule:
        return self._rule

    @property
    def manager(self) -> ObjectManager:
        return self._manager

    def build_criteria(self, candidate: Any) -> dict[str, Any] | None:
        """Criteria for *candidate*, or None when the check must be skipped.

        With ``ignore_null`` a single None among the checked values skips the
        whole check: a narrower key than the rule names would be unsound.
        """
        criteria: dict[str, Any] = {}
        has_null = False

        for field, value in self._reader.read(candidate):
            if value is None:
                has_null = True
                if self._rule.ignore_null:
                    continue
            criteria[field] = value
            if value is not None and self._manager.has_association(field):
                self._manager.initialize(value)

        if has_null and self._rule.ignore_null:
            logger.debug("Skipping %s check: null value", self._rule.record_type)
            return None
        if not criteria:
            return None
        return criteria

    def find_conflicts(self, criteria: dict[str, Any]) -> QueryResult:
        """Run the configured lookup and normalize its answer.

        A cursor answer is closed once normalized, unread rows included.
        """
        raw = self._lookup(criteria)
        try:
            return normalize_result(raw)
        finally:
            if isinstance(raw, Iterator):
                close = getattr(raw, "close", None)
                if callable(close):
                    close()

    def check(self, candidate: Any) -> Verdict:
        """Verdict for *candidate*; None always passes."""
        if candidate is None:
            return Verdict.passed()

        criteria = self.build_criteria(candidate)
        if criteria is None:
            return Verdict.passed()

        result = self.find_conflicts(criteria)
        return self.interpret(candidate, criteria, result)

    def interpret(
        self,
        candidate: Any,
        criteria: dict[str, Any],
        result: QueryResult,
    ) -> Verdict:
        """Pass on no match or a lone self-match; fail otherwise."""
        records = result.records
        if not records or is_only(result, candidate):
            return Verdict.passed()

        path = self._rule.blamed_field
        logger.debug(
            "Not unique: %s.%s (%d conflicting)",
            self._rule.record_type,
            path,
            len(records),
        )
        return Verdict.failed(
            message=self._rule.message,
            path=path,
            invalid_value=criteria[path],
            cause=records,
        )


def check_unique(rule: UniqueRule, candidate: Any, registry: ManagerRegistry) -> Verdict:
    """One-shot helper: bind *rule* against *registry* and check *candidate*."""
    return UniquenessChecker.from_registry(rule, registry).check(candidate)
