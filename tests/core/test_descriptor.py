"""Tests for ModelDescriptor."""

import dataclasses

import pytest

from tablemodel.core.descriptor import ModelDescriptor


class TestModelDescriptor:
    def test_fields(self):
        md = ModelDescriptor("db1", "first_one", "fo")
        assert md.database == "db1"
        assert md.table_name == "first_one"
        assert md.table_alias == "fo"
        assert md.primary_key_names == ()

    def test_alias_optional(self):
        assert ModelDescriptor("db1", "first_one").table_alias is None

    def test_is_immutable(self):
        md = ModelDescriptor("db1", "first_one")
        with pytest.raises(dataclasses.FrozenInstanceError):
            md.table_name = "other"  # type: ignore[misc]

    def test_with_primary_key_names_returns_copy(self):
        md = ModelDescriptor("db1", "first_one", "fo")
        with_pk = md.with_primary_key_names(["id"])
        assert with_pk is not md
        assert with_pk.primary_key_names == ("id",)
        assert md.primary_key_names == ()
        assert with_pk.table_alias == "fo"

    def test_string_key_is_one_name(self):
        md = ModelDescriptor("db", "t").with_primary_key_names("id")
        assert md.primary_key_names == ("id",)
        assert md.single_primary_key_name == "id"

    def test_string_key_in_constructor(self):
        md = ModelDescriptor("db", "t", primary_key_names="id")
        assert md.primary_key_names == ("id",)

    def test_primary_key_order_preserved(self):
        md = ModelDescriptor("db1", "t", primary_key_names=["b", "a"])
        assert md.primary_key_names == ("b", "a")


class TestSinglePrimaryKeyName:
    def test_single(self):
        md = ModelDescriptor("db1", "t").with_primary_key_names(["id"])
        assert md.single_primary_key_name == "id"

    def test_none_declared(self):
        assert ModelDescriptor("db1", "t").single_primary_key_name is None

    def test_composite(self):
        md = ModelDescriptor("db1", "t").with_primary_key_names(["a", "b"])
        assert md.single_primary_key_name is None
