"""UniquenessService — named rules checked against a SQL record store.

Bridges configured rules (``[rules.<name>]`` in ``uniqctl.toml``) and the
:class:`~uniqctl.infrastructure.store.SqlRecordStore` for the CLI. Broken
rules and unknown names become ``ok=False`` results; a conflict is a normal
``ok=True`` result with ``unique`` set to False.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from uniqctl.domain.errors import InvalidRuleDefinition
from uniqctl.services.checker import UniquenessChecker, resolve_manager
from uniqctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from uniqctl.domain.rules import UniqueRule
    from uniqctl.domain.verdict import Violation
    from uniqctl.infrastructure.store import SqlObjectManager, SqlRecordStore

logger = logging.getLogger(__name__)


class UniquenessService:
    """Runs configured uniqueness rules against one record store."""

    def __init__(self, store: SqlRecordStore, rules: Mapping[str, UniqueRule]) -> None:
        self._store = store
        self._rules = dict(rules)

    def list_rules(self) -> ServiceResult:
        """Describe every configured rule."""
        items = [
            {
                "name": name,
                "record_type": rule.record_type,
                "fields": list(rule.fields),
                "lookup_method": rule.lookup_method,
                "error_path": rule.error_path,
                "ignore_null": rule.ignore_null,
            }
            for name, rule in sorted(self._rules.items())
        ]
        return ServiceResult(ok=True, op="list_rules", data={"count": len(items), "items": items})

    def lint_rules(self) -> ServiceResult:
        """Bind every rule to the store and report the ones that are broken."""
        issues: list[dict[str, Any]] = []
        for name, rule in sorted(self._rules.items()):
            try:
                UniquenessChecker.from_registry(rule, self._store)
            except InvalidRuleDefinition as exc:
                logger.debug("Rule %s is invalid: %s", name, exc)
                issues.append(
                    {
                        "rule": name,
                        "record_type": exc.record_type,
                        "message": str(exc),
                    }
                )
        return ServiceResult(
            ok=True,
            op="lint_rules",
            data={
                "count": len(self._rules),
                "issues": issues,
                "healthy": not issues,
            },
        )

    def check(
        self,
        rule_name: str,
        values: Mapping[str, Any],
        *,
        record_id: Any = None,
    ) -> ServiceResult:
        """Check a candidate built from *values* against rule *rule_name*.

        With *record_id* the candidate is the persisted record with that
        primary key, with *values* overlaid, so a stored record can be
        re-validated without conflicting with itself.
        """
        op = "check"
        rule = self._rules.get(rule_name)
        if rule is None:
            return _error(op, "UNKNOWN_RULE", f"No rule named {rule_name!r}", rule=rule_name)

        try:
            manager = cast("SqlObjectManager", resolve_manager(rule, self._store))
            checker = UniquenessChecker(rule, manager)
        except InvalidRuleDefinition as exc:
            return _error(op, "INVALID_RULE", str(exc), rule=rule_name)

        try:
            if record_id is None:
                candidate = manager.build(values)
            else:
                candidate = manager.load(record_id)
                if candidate is None:
                    return _error(
                        op,
                        "NOT_FOUND",
                        f"No {rule.record_type} record with primary key {record_id!r}",
                        rule=rule_name,
                    )
                manager.apply(candidate, values)
        except KeyError as exc:
            return _error(op, "INVALID_VALUE", str(exc.args[0]), rule=rule_name)

        verdict = checker.check(candidate)
        data: dict[str, Any] = {
            "rule": rule_name,
            "record_type": rule.record_type,
            "unique": verdict.ok,
        }
        if verdict.violation is not None:
            data["violation"] = _describe(verdict.violation, manager)
        return ServiceResult(ok=True, op=op, data=data)


def _describe(violation: Violation, manager: SqlObjectManager) -> dict[str, Any]:
    invalid_value = violation.invalid_value
    if manager.has_association(violation.path):
        invalid_value = manager.identify(invalid_value)
    return {
        "code": violation.code,
        "message": violation.message,
        "path": violation.path,
        "invalid_value": invalid_value,
        "conflicts": [manager.identify(record) for record in violation.cause],
    }


def _error(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )
