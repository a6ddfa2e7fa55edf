"""Tests for UniquenessChecker against in-process store doubles."""

from __future__ import annotations

from typing import Any

import pytest

from tests.fakes import (
    FakeManager,
    FakeRegistry,
    GetterPerson,
    LazyTeam,
    Person,
    RestrictedRepository,
    SpyRepository,
    StrictCursor,
    UncountedCursor,
)
from uniqctl.domain.errors import InvalidRuleDefinition
from uniqctl.domain.rules import IS_NOT_UNIQUE, UniqueRule
from uniqctl.services.checker import UniquenessChecker, check_unique, resolve_manager


def _rule(**overrides: Any) -> UniqueRule:
    params: dict[str, Any] = {"record_type": "User", "fields": ["email"]}
    params.update(overrides)
    return UniqueRule(**params)


def _checker(result: Any = None, **overrides: Any) -> tuple[UniquenessChecker, SpyRepository]:
    repo = SpyRepository(result)
    checker = UniquenessChecker(_rule(**overrides), FakeManager(repository=repo))
    return checker, repo


class TestRuleValidation:
    def test_empty_fields_rejected(self) -> None:
        """A rule with no fields cannot be bound."""
        with pytest.raises(InvalidRuleDefinition, match="At least one field"):
            UniquenessChecker(_rule(fields=[]), FakeManager())

    def test_empty_fields_rejected_before_registry_lookup(self) -> None:
        with pytest.raises(InvalidRuleDefinition, match="At least one field"):
            resolve_manager(_rule(fields=[]), FakeRegistry({}))

    def test_unknown_record_type(self) -> None:
        """The error names the record type the rule asked for."""
        registry = FakeRegistry({"Post": FakeManager()})
        with pytest.raises(InvalidRuleDefinition, match='"User" does not exist') as exc_info:
            UniquenessChecker.from_registry(_rule(), registry)
        assert exc_info.value.record_type == "User"

    def test_unmanaged_record_type(self) -> None:
        """A known type without a manager is a broken rule, not a pass."""
        registry = FakeRegistry({"User": None})
        with pytest.raises(InvalidRuleDefinition, match="object manager"):
            UniquenessChecker.from_registry(_rule(), registry)

    def test_unmapped_field(self) -> None:
        with pytest.raises(InvalidRuleDefinition, match='"nickname" is not mapped'):
            UniquenessChecker(_rule(fields=["email", "nickname"]), FakeManager())

    def test_association_is_a_valid_field(self) -> None:
        """Associations count as mapped even though they are not plain fields."""
        checker = UniquenessChecker(_rule(fields=["team"]), FakeManager())
        assert checker.rule.fields == ("team",)

    def test_missing_lookup_method(self) -> None:
        with pytest.raises(InvalidRuleDefinition, match='does not have "find_all_by"'):
            UniquenessChecker(_rule(lookup_method="find_all_by"), FakeManager())

    def test_non_callable_lookup_method(self) -> None:
        """A public attribute that is not callable is not a lookup."""
        with pytest.raises(InvalidRuleDefinition, match="not_an_operation"):
            UniquenessChecker(_rule(lookup_method="not_an_operation"), FakeManager())

    def test_private_lookup_method(self) -> None:
        """Underscore methods are never exposed as lookups."""
        with pytest.raises(InvalidRuleDefinition, match="_find_deleted"):
            UniquenessChecker(_rule(lookup_method="_find_deleted"), FakeManager())

    def test_declared_lookup_methods_restrict_choice(self) -> None:
        """A repository listing its lookups rejects any other public method."""
        manager = FakeManager(repository=RestrictedRepository())
        with pytest.raises(InvalidRuleDefinition, match="not a lookup operation"):
            UniquenessChecker(_rule(lookup_method="find_by_email_ci"), manager)

    def test_declared_lookup_method_accepted(self) -> None:
        manager = FakeManager(repository=RestrictedRepository())
        checker = UniquenessChecker(_rule(lookup_method="find_by"), manager)
        assert checker.check(Person(id=1, email="a@x.com")).ok

    def test_error_path_must_be_checked_field(self) -> None:
        with pytest.raises(InvalidRuleDefinition, match='error path "name"'):
            UniquenessChecker(_rule(error_path="name"), FakeManager())

    def test_invalid_rule_raises_even_for_absent_candidate(self) -> None:
        """Binding happens before the candidate is looked at."""
        with pytest.raises(InvalidRuleDefinition):
            check_unique(_rule(fields=[]), None, FakeRegistry({"User": FakeManager()}))


class TestShortCircuits:
    def test_absent_candidate_passes(self) -> None:
        """None passes without touching the repository."""
        checker, repo = _checker([Person(id=9, email="a@x.com")])
        assert checker.check(None).ok
        assert repo.calls == []

    def test_null_field_ignored_passes_without_query(self) -> None:
        checker, repo = _checker([Person(id=9)])
        assert checker.check(Person(id=1, email=None)).ok
        assert repo.calls == []

    def test_any_null_field_skips_whole_check(self) -> None:
        """One null among several fields skips the query entirely."""
        checker, repo = _checker(
            [Person(id=9, email="a@x.com")],
            fields=["email", "name"],
        )
        assert checker.check(Person(id=1, email="a@x.com", name=None)).ok
        assert repo.calls == []

    def test_null_checked_when_not_ignored(self) -> None:
        """With ignore_null off, None goes into the criteria and can conflict."""
        other = Person(id=9)
        checker, repo = _checker([other], ignore_null=False)
        verdict = checker.check(Person(id=1, email=None))
        assert repo.calls == [("find_by", {"email": None})]
        assert not verdict.ok
        assert verdict.violation is not None
        assert verdict.violation.invalid_value is None


class TestCriteria:
    def test_criteria_in_field_order(self) -> None:
        """Criteria keys follow the rule's field order, not the record's."""
        checker, repo = _checker(None, fields=["name", "email"])
        checker.check(Person(id=1, email="a@x.com", name="Ann"))
        assert repo.calls == [("find_by", {"name": "Ann", "email": "a@x.com"})]
        assert list(repo.calls[0][1]) == ["name", "email"]

    def test_getter_used_for_criteria(self) -> None:
        checker, repo = _checker(None)
        checker.check(GetterPerson("g@x.com"))
        assert repo.calls == [("find_by", {"email": "g@x.com"})]

    def test_mapping_candidate(self) -> None:
        checker, repo = _checker(None)
        assert checker.check({"email": "m@x.com"}).ok
        assert repo.calls == [("find_by", {"email": "m@x.com"})]

    def test_mapping_candidate_missing_key_raises(self) -> None:
        """A mapping without the checked key is an error, not a silent pass."""
        checker, repo = _checker(None)
        with pytest.raises(KeyError, match="email"):
            checker.check({"name": "Ann"})
        assert repo.calls == []

    def test_association_value_initialized(self) -> None:
        """A lazy associated record is loaded before it is used as a criterion."""
        manager = FakeManager()
        checker = UniquenessChecker(_rule(fields=["team"]), manager)
        team = LazyTeam(id=4)
        checker.check(Person(id=1, team=team))
        assert team.loaded is True
        assert manager.initialized == [team]
        assert manager.repository.calls == [("find_by", {"team": team})]

    def test_plain_field_not_initialized(self) -> None:
        manager = FakeManager()
        UniquenessChecker(_rule(), manager).check(Person(id=1, email="a@x.com"))
        assert manager.initialized == []

    def test_custom_lookup_method(self) -> None:
        checker, repo = _checker(None, lookup_method="find_by_email_ci")
        checker.check(Person(id=1, email="A@x.com"))
        assert repo.calls == [("find_by_email_ci", {"email": "A@x.com"})]

    def test_one_store_call_per_check(self) -> None:
        checker, repo = _checker([Person(id=9, email="a@x.com")])
        checker.check(Person(id=1, email="a@x.com"))
        assert len(repo.calls) == 1


class TestVerdicts:
    def test_no_match_passes(self) -> None:
        checker, _ = _checker([])
        assert checker.check(Person(id=1, email="a@x.com")).ok

    def test_none_result_passes(self) -> None:
        checker, _ = _checker(None)
        assert checker.check(Person(id=1, email="a@x.com")).ok

    def test_self_match_passes(self) -> None:
        """A stored record that finds only itself is unique."""
        me = Person(id=1, email="a@x.com")
        checker, _ = _checker([me])
        assert checker.check(me).ok

    def test_self_match_as_single_record_passes(self) -> None:
        me = Person(id=1, email="a@x.com")
        checker, _ = _checker(me)
        assert checker.check(me).ok

    def test_equal_but_distinct_record_fails(self) -> None:
        """Self-match is identity, not equality."""
        checker, _ = _checker([Person(id=1, email="a@x.com")])
        assert not checker.check(Person(id=1, email="a@x.com")).ok

    def test_other_match_fails_blaming_first_field(self) -> None:
        other = Person(id=9, email="a@x.com", name="Bob")
        checker, _ = _checker([other], fields=["email", "name"])
        verdict = checker.check(Person(id=1, email="a@x.com", name="Bob"))
        assert not verdict.ok
        assert verdict.violation is not None
        assert verdict.violation.code == IS_NOT_UNIQUE
        assert verdict.violation.path == "email"
        assert verdict.violation.invalid_value == "a@x.com"
        assert verdict.violation.cause == (other,)

    def test_error_path_blamed(self) -> None:
        """error_path moves the blame to another checked field."""
        checker, _ = _checker(
            [Person(id=9, email="a@x.com", name="Bob")],
            fields=["email", "name"],
            error_path="name",
        )
        verdict = checker.check(Person(id=1, email="a@x.com", name="Bob"))
        assert verdict.violation is not None
        assert verdict.violation.path == "name"
        assert verdict.violation.invalid_value == "Bob"

    def test_rule_message_used(self) -> None:
        checker, _ = _checker([Person(id=9)], message="Email taken.")
        verdict = checker.check(Person(id=1, email="a@x.com"))
        assert verdict.violation is not None
        assert verdict.violation.message == "Email taken."

    def test_many_matches_fail_even_with_self(self) -> None:
        """Two matches are a conflict even when one of them is the candidate."""
        me = Person(id=1, email="a@x.com")
        checker, _ = _checker([me, Person(id=9, email="a@x.com")])
        assert not checker.check(me).ok

    def test_counted_cursor_fails_without_third_fetch(self) -> None:
        me = Person(id=1, email="a@x.com")
        others = [me, Person(id=2), Person(id=3), Person(id=4)]
        cursor = StrictCursor(others, count=4)
        checker, _ = _checker(cursor)
        verdict = checker.check(me)
        assert not verdict.ok
        assert cursor.fetched == 2
        assert verdict.violation is not None
        assert len(verdict.violation.cause) == 2

    def test_cursor_with_lone_self_passes(self) -> None:
        me = Person(id=1, email="a@x.com")
        checker, _ = _checker(StrictCursor([me], count=1))
        assert checker.check(me).ok

    def test_uncounted_cursor_judged_on_first_element(self) -> None:
        """Without a length, only the first element is read."""
        me = Person(id=1, email="a@x.com")
        cursor = UncountedCursor([me, Person(id=2)])
        checker, _ = _checker(cursor)
        assert checker.check(me).ok
        assert cursor.fetched == 1

    def test_failure_is_returned_not_raised(self) -> None:
        checker, _ = _checker([Person(id=9)])
        verdict = checker.check(Person(id=1, email="a@x.com"))
        assert verdict.ok is False


class TestCursorCleanup:
    def test_cursor_closed_after_conflict(self) -> None:
        """Unread rows are released once the verdict is known."""
        cursor = StrictCursor([Person(id=2), Person(id=3), Person(id=4)], count=3)
        checker, _ = _checker(cursor)
        assert not checker.check(Person(id=1, email="a@x.com")).ok
        assert cursor.closed is True

    def test_cursor_closed_after_pass(self) -> None:
        cursor = StrictCursor([], count=0)
        checker, _ = _checker(cursor)
        assert checker.check(Person(id=1, email="a@x.com")).ok
        assert cursor.closed is True


class TestUserEmailScenario:
    """Rule {record_type: User, fields: [email]} over a small store."""

    def test_scenario(self) -> None:
        repo = SpyRepository([])
        registry = FakeRegistry({"User": FakeManager(repository=repo)})
        checker = UniquenessChecker.from_registry(_rule(), registry)
        candidate = Person(id=1, email="a@x.com")

        assert checker.check(candidate).ok

        repo.result = [Person(id=2, email="a@x.com")]
        verdict = checker.check(candidate)
        assert not verdict.ok
        assert verdict.violation is not None
        assert verdict.violation.path == "email"
        assert verdict.violation.invalid_value == "a@x.com"

        repo.result = [candidate]
        assert checker.check(candidate).ok
