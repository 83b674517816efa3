"""
userpatch/tests/test_update_mapping.py

Tests for build_update_mapping: which columns end up in the UPDATE and with what.
"""

import pytest

from userpatch.constants import IMMUTABLE_USER_FIELDS
from userpatch.errors import EmptyPatch
from userpatch.models.user import User
from userpatch.schemas.user import UserPatch
from userpatch.services.patch import build_update_mapping


def mapping_for(body):
    patch = UserPatch.model_validate(body)
    return build_update_mapping(patch, User.__table__, immutable=IMMUTABLE_USER_FIELDS)


class TestBuildUpdateMapping:

    def test_single_value(self):
        assert mapping_for({"name": "X"}) == {"name": "X"}

    def test_null_on_nullable_column(self):
        assert mapping_for({"phone": None}) == {"phone": None}

    def test_null_on_non_nullable_columns_uses_zero_value(self):
        assert mapping_for({"bio": None, "active": None, "score": None, "role": None, "age": None}) == {
            "age": 0,
            "active": False,
            "bio": "",
            "role": "",
            "score": 0.0,
        }

    def test_mixed_states(self):
        mapping = mapping_for({"age": 40, "phone": None, "active": False, "role": None, "score": 88.5})
        assert mapping == {"age": 40, "phone": None, "active": False, "role": "", "score": 88.5}
        assert "name" not in mapping
        assert "bio" not in mapping

    def test_follows_declared_field_order(self):
        mapping = mapping_for({"score": 1.0, "name": "Zed", "phone": None})
        assert list(mapping) == ["name", "phone", "score"]

    def test_empty_patch(self):
        with pytest.raises(EmptyPatch):
            mapping_for({})

    def test_identity_fields_never_included(self):
        mapping = mapping_for({"email": "new@example.com", "id": 99, "name": "Keep"})
        assert "email" not in mapping
        assert "id" not in mapping

    def test_only_identity_fields_is_empty(self):
        with pytest.raises(EmptyPatch):
            mapping_for({"email": "new@example.com"})

    def test_immutable_names_are_skipped(self):
        patch = UserPatch.model_validate({"name": "X", "age": 5})
        assert build_update_mapping(patch, User.__table__, immutable={"name"}) == {"age": 5}
