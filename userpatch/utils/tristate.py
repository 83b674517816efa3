"""
userpatch/utils/tristate.py

TriState[T] tells apart the three things a PATCH body can say about a field:

  - the key is missing         -> unset  (leave the column alone)
  - the key is present as null -> null   (clear the column)
  - the key carries a value    -> value  (overwrite the column)

Plain Optional[T] collapses the first two, so patch schemas declare their fields as
TriState[T] with UNSET as the default. Pydantic only runs the TriState schema for
keys that are actually in the body, which is what makes "missing" distinguishable
from "null".
"""

from __future__ import annotations

from typing import Any, Generic, Tuple, TypeVar, get_args

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

T = TypeVar("T")

# Zero values carried by the null state, keyed by the declared inner type
_ZERO_VALUES = {str: "", int: 0, float: 0.0, bool: False}


def zero_value(tp: Any) -> Any:
    """Return the empty value for a scalar type, or None when there is no obvious one."""
    return _ZERO_VALUES.get(tp)


class TriState(Generic[T]):
    """
    Immutable unset / null / value container for one patch field.

    Build instances with TriState.of(), TriState.null() or the shared UNSET
    rather than calling the constructor directly.
    """

    __slots__ = ("_present", "_null", "_value")

    def __init__(self, present: bool = False, null: bool = False, value: Any = None) -> None:
        if null and not present:
            raise ValueError("a null TriState must also be present")
        object.__setattr__(self, "_present", present)
        object.__setattr__(self, "_null", null)
        object.__setattr__(self, "_value", value)

    @classmethod
    def of(cls, value: T) -> "TriState[T]":
        return cls(present=True, null=False, value=value)

    @classmethod
    def null(cls, zero: Any = None) -> "TriState[T]":
        return cls(present=True, null=True, value=zero)

    def is_present(self) -> bool:
        return self._present

    def is_null(self) -> bool:
        return self._present and self._null

    def value_if_set(self) -> Tuple[T, bool]:
        """
        Return (value, True) for the value state. For null the zero value comes
        back with False; for unset it is (None, False).
        """
        return self._value, self._present and not self._null

    def as_untyped(self) -> Tuple[Any, bool]:
        """Like value_if_set(), but never leaks the zero value of a null field."""
        if not self._present or self._null:
            return None, False
        return self._value, True

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("TriState is immutable")

    def __copy__(self) -> "TriState[T]":
        return self

    def __deepcopy__(self, memo: dict) -> "TriState[T]":
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented
        return (self._present, self._null, self._value) == (other._present, other._null, other._value)

    def __hash__(self) -> int:
        return hash((self._present, self._null, self._value))

    def __repr__(self) -> str:
        if not self._present:
            return "unset"
        if self._null:
            return "null"
        return f"value({self._value!r})"

    # ---- Pydantic v2 integration ----
    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        args = get_args(source)
        inner_type = args[0] if args else Any
        zero = zero_value(inner_type)

        def wrap(value: Any) -> "TriState[Any]":
            if value is None:
                return cls.null(zero)
            return cls.of(value)

        return core_schema.no_info_after_validator_function(
            wrap,
            core_schema.nullable_schema(handler.generate_schema(inner_type)),
            serialization=core_schema.plain_serializer_function_ser_schema(lambda state: state.as_untyped()[0]),
        )


UNSET: TriState[Any] = TriState()
