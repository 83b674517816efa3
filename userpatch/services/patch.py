"""
userpatch/services/patch.py

Turns a validated patch model into the sparse column -> value mapping that a
single UPDATE statement applies to one row.

  unset    -> column left out of the mapping
  null     -> NULL for nullable columns, the field's zero value otherwise
  value(v) -> v

Identity columns are skipped whatever the patch holds. An empty result raises
EmptyPatch: a PATCH that changes nothing is rejected instead of silently accepted.
"""

import logging
from typing import Any, Dict, Iterable

from pydantic import BaseModel
from sqlalchemy import Table

from userpatch.errors import EmptyPatch
from userpatch.utils.tristate import TriState

logger = logging.getLogger(__name__)

UpdateMapping = Dict[str, Any]


def set_update(mapping: UpdateMapping, column: str, state: TriState[Any], nullable: bool) -> None:
    """Add one field to the mapping according to its state."""
    if not state.is_present():
        return
    if state.is_null():
        # the null state carries the field's zero value
        mapping[column] = None if nullable else state.value_if_set()[0]
        return
    mapping[column] = state.as_untyped()[0]


def build_update_mapping(patch: BaseModel, table: Table, immutable: Iterable[str] = ()) -> UpdateMapping:
    """
    Build the update mapping for `patch` against `table`, in the patch model's
    field order. Field names are column names.

    Raises EmptyPatch when no field was present.
    """
    skip = set(immutable)
    mapping: UpdateMapping = {}
    for field_name in type(patch).model_fields:
        if field_name in skip:
            continue
        state = getattr(patch, field_name)
        if not isinstance(state, TriState):
            continue
        column = table.columns[field_name]
        set_update(mapping, column.name, state, column.nullable)

    if not mapping:
        raise EmptyPatch()
    logger.debug(f"Built update mapping for {table.name}: {mapping}")
    return mapping
