"""
userpatch/utils/patch_validation.py

Field-level validation for TriState patch fields.

Rules are attached to a field as Annotated metadata:

    name: Annotated[TriState[str], PatchRules(NonNull(), MinLength(2), MaxLength(100))] = UNSET

PatchValidator walks a patch model and, for every TriState field:
  - unset => valid
  - null  => valid, unless the field carries NonNull()
  - value => each inner rule runs against the value, in order; the first
             failure is reported for that field

Every failing field is collected so the client sees all problems at once.
Fields that are not TriState are left to pydantic's own validation.
"""

import logging
from typing import Any, Iterable, List, Sequence

from pydantic import BaseModel

from userpatch.errors import ValidationFailed
from userpatch.schemas.error import FieldError
from userpatch.utils.tristate import TriState

logger = logging.getLogger(__name__)


class Rule:
    """A single predicate against a present, non-null value."""

    name: str = ""
    # True for rules that look at the null state instead of the value
    checks_null: bool = False

    def __init__(self, param: Any = None) -> None:
        self.param = param

    def check(self, value: Any) -> bool:
        raise NotImplementedError

    def message(self, field: str) -> str:
        return f"{field} is invalid"

    def __repr__(self) -> str:
        if self.param is None:
            return self.name
        return f"{self.name}={self.param}"


class MinLength(Rule):
    name = "min"

    def check(self, value: Any) -> bool:
        return len(value) >= self.param

    def message(self, field: str) -> str:
        return f"{field} must be at least {self.param} characters"


class MaxLength(Rule):
    name = "max"

    def check(self, value: Any) -> bool:
        return len(value) <= self.param

    def message(self, field: str) -> str:
        return f"{field} must be at most {self.param} characters"


class Gte(Rule):
    name = "gte"

    def check(self, value: Any) -> bool:
        return value >= self.param

    def message(self, field: str) -> str:
        return f"{field} must be greater than or equal to {self.param}"


class Lte(Rule):
    name = "lte"

    def check(self, value: Any) -> bool:
        return value <= self.param

    def message(self, field: str) -> str:
        return f"{field} must be less than or equal to {self.param}"


class Gt(Rule):
    name = "gt"

    def check(self, value: Any) -> bool:
        return value > self.param

    def message(self, field: str) -> str:
        return f"{field} must be greater than {self.param}"


class Lt(Rule):
    name = "lt"

    def check(self, value: Any) -> bool:
        return value < self.param

    def message(self, field: str) -> str:
        return f"{field} must be less than {self.param}"


class OneOf(Rule):
    name = "oneof"

    def __init__(self, *choices: Any) -> None:
        super().__init__(tuple(choices))

    def check(self, value: Any) -> bool:
        return value in self.param

    def message(self, field: str) -> str:
        return f"{field} must be one of [{' '.join(str(c) for c in self.param)}]"

    def __repr__(self) -> str:
        return f"{self.name}={' '.join(str(c) for c in self.param)}"


class NonNull(Rule):
    """Forbids an explicit null. Unset and values are not affected."""

    name = "nonull"
    checks_null = True

    def check(self, value: Any) -> bool:
        return True

    def message(self, field: str) -> str:
        return f"{field} cannot be null"


class PatchRules:
    """Ordered rule list attached to a TriState field through Annotated."""

    def __init__(self, *rules: Rule) -> None:
        self.rules: Sequence[Rule] = tuple(rules)

    @property
    def inner_rules(self) -> List[Rule]:
        return [rule for rule in self.rules if not rule.checks_null]

    @property
    def forbids_null(self) -> bool:
        return any(rule.checks_null for rule in self.rules)

    def __repr__(self) -> str:
        return f"PatchRules({';'.join(repr(rule) for rule in self.rules)})"


def rules_for(model: type[BaseModel], field_name: str) -> PatchRules:
    """Return the PatchRules declared on a model field, or an empty set."""
    for meta in model.model_fields[field_name].metadata:
        if isinstance(meta, PatchRules):
            return meta
    return PatchRules()


def check_field(field: str, state: TriState[Any], rules: PatchRules) -> FieldError | None:
    """Validate one TriState against its rules; returns the first violation, if any."""
    if not state.is_present():
        return None

    if state.is_null():
        if rules.forbids_null:
            rule = next(r for r in rules.rules if r.checks_null)
            return FieldError(field=field, rule=rule.name, message=rule.message(field))
        return None

    value, _ = state.as_untyped()
    for rule in rules.inner_rules:
        if not rule.check(value):
            return FieldError(field=field, rule=rule.name, message=rule.message(field))
    return None


class PatchValidator:
    """
    Validates TriState fields on patch models. One instance is created by the
    application factory and handed to request handlers as a dependency.
    """

    def collect(self, patch: BaseModel) -> List[FieldError]:
        """Return every field violation on the patch, in field declaration order."""
        model = type(patch)
        errors: List[FieldError] = []
        for field_name in model.model_fields:
            state = getattr(patch, field_name)
            if not isinstance(state, TriState):
                continue
            error = check_field(field_name, state, rules_for(model, field_name))
            if error is not None:
                errors.append(error)
        return errors

    def validate(self, patch: BaseModel) -> None:
        """Raise ValidationFailed carrying all violations, if there are any."""
        errors = self.collect(patch)
        if errors:
            logger.warning(f"Patch validation failed: {describe(errors)}")
            raise ValidationFailed(errors)


def describe(errors: Iterable[FieldError]) -> str:
    return ", ".join(f"{e.field}:{e.rule}" for e in errors)
