"""
userpatch/tests/test_patch_validation.py

Tests for the TriState field rules: unset and null skip the inner rules,
values are checked in declared order, and every failing field is reported.
"""

import pytest

from userpatch.errors import ValidationFailed
from userpatch.schemas.user import UserPatch
from userpatch.utils.patch_validation import (
    Gt,
    Gte,
    Lt,
    MaxLength,
    MinLength,
    NonNull,
    OneOf,
    PatchRules,
    PatchValidator,
    check_field,
    rules_for,
)
from userpatch.utils.tristate import UNSET, TriState


@pytest.fixture
def validator():
    return PatchValidator()


class TestCheckField:

    def test_unset_and_null_skip_inner_rules(self):
        # impossible to satisfy for any value
        rules = PatchRules(MinLength(1000), OneOf("nothing"))
        assert check_field("bio", UNSET, rules) is None
        assert check_field("bio", TriState.null(""), rules) is None

    def test_first_failing_rule_is_reported(self):
        rules = PatchRules(MinLength(2), MaxLength(3))
        error = check_field("name", TriState.of("A"), rules)
        assert error.field == "name"
        assert error.rule == "min"
        assert error.message == "name must be at least 2 characters"

    def test_rules_run_in_declared_order(self):
        rules = PatchRules(MaxLength(3), MinLength(10))
        error = check_field("name", TriState.of("abcdef"), rules)
        assert error.rule == "max"

    def test_no_rules_accepts_any_value(self):
        assert check_field("active", TriState.of(True), PatchRules()) is None

    def test_nonnull_only_fails_on_null(self):
        rules = PatchRules(NonNull(), MinLength(2))
        assert check_field("name", UNSET, rules) is None
        assert check_field("name", TriState.of("Bob"), rules) is None
        error = check_field("name", TriState.null(""), rules)
        assert error.rule == "nonull"
        assert error.message == "name cannot be null"

    def test_numeric_bounds(self):
        error = check_field("age", TriState.of(-1), PatchRules(Gte(0)))
        assert error.rule == "gte"
        assert error.message == "age must be greater than or equal to 0"

    def test_strict_bounds(self):
        assert check_field("score", TriState.of(0.5), PatchRules(Gt(0))) is None
        error = check_field("score", TriState.of(0), PatchRules(Gt(0)))
        assert error.rule == "gt"
        assert error.message == "score must be greater than 0"

        assert check_field("age", TriState.of(9), PatchRules(Lt(10))) is None
        error = check_field("age", TriState.of(10), PatchRules(Lt(10)))
        assert error.rule == "lt"
        assert error.message == "age must be less than 10"

    def test_oneof_message(self):
        error = check_field("role", TriState.of("root"), PatchRules(OneOf("admin", "user", "guest")))
        assert error.rule == "oneof"
        assert error.message == "role must be one of [admin user guest]"


class TestUserPatchRules:

    def test_declared_rules(self):
        assert [r.name for r in rules_for(UserPatch, "name").rules] == ["nonull", "min", "max"]
        assert [r.name for r in rules_for(UserPatch, "score").rules] == ["gte", "lte"]
        assert rules_for(UserPatch, "active").rules == ()

    @pytest.mark.parametrize(
        "body,field,rule",
        [
            ({"name": "A"}, "name", "min"),
            ({"name": "x" * 101}, "name", "max"),
            ({"name": None}, "name", "nonull"),
            ({"age": -1}, "age", "gte"),
            ({"age": 151}, "age", "lte"),
            ({"phone": "123"}, "phone", "min"),
            ({"phone": "1" * 21}, "phone", "max"),
            ({"bio": "b" * 501}, "bio", "max"),
            ({"role": "superuser"}, "role", "oneof"),
            ({"score": -0.5}, "score", "gte"),
            ({"score": 100.5}, "score", "lte"),
        ],
    )
    def test_rejected_values(self, validator, body, field, rule):
        errors = validator.collect(UserPatch.model_validate(body))
        assert [(e.field, e.rule) for e in errors] == [(field, rule)]

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "Al"},
            {"name": "x" * 100},
            {"age": 0},
            {"age": 150},
            {"phone": "1234567890"},
            {"bio": ""},
            {"role": "guest"},
            {"score": 0},
            {"score": 100},
        ],
    )
    def test_boundary_values_pass(self, validator, body):
        assert validator.collect(UserPatch.model_validate(body)) == []

    def test_nulls_pass_even_with_strict_rules(self, validator):
        body = {"age": None, "phone": None, "bio": None, "role": None, "score": None, "active": None}
        assert validator.collect(UserPatch.model_validate(body)) == []

    def test_all_failures_collected(self, validator):
        patch = UserPatch.model_validate({"name": "A", "age": 200, "role": "root", "bio": "ok"})
        with pytest.raises(ValidationFailed) as exc_info:
            validator.validate(patch)
        assert [e.field for e in exc_info.value.errors] == ["name", "age", "role"]
        assert exc_info.value.status_code == 400
