"""
Tests for AbstractModel.

Unit tests cover the instance helpers; the integration classes run every
model operation end to end against the in-memory SQLite fixture.
"""

from __future__ import annotations

import pytest

from tablemodel import AbstractModel, ModelDescriptor, ModelOperations
from tablemodel.core.errors import UnusedParamsError

from tests._support.models import FirstOne, Item, Membership, Note


class TestAbstractModelBasics:
    def test_cannot_instantiate_without_contract(self):
        class Incomplete(AbstractModel):
            @classmethod
            def get_model_descriptor(cls):
                return ModelDescriptor("db1", "incomplete")

        with pytest.raises(TypeError):
            Incomplete()

    def test_attributes_and_row(self):
        item = Item(name="a", value=1)
        assert item.name == "a"
        assert item.to_row() == {"name": "a", "value": 1}
        assert item.to_row(["name", "tag"]) == {"name": "a", "tag": None}

    def test_from_row(self):
        item = Item.from_row({"id": 1, "name": "a"})
        assert isinstance(item, Item)
        assert item.id == 1

    def test_equality(self):
        assert Item(name="a") == Item(name="a")
        assert Item(name="a") != Item(name="b")
        assert Item(name="a") != FirstOne(name="a")

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Item())

    def test_repr(self):
        assert repr(Item(name="a")) == "Item(name='a')"

    def test_descriptor_helpers(self):
        assert Item.get_model_descriptor_cached() == ModelDescriptor(
            "test", "items", "i", ("id",)
        )
        assert Item.get_single_primary_key_name() == "id"
        assert Membership.get_single_primary_key_name() is None

    def test_get_query(self):
        query = FirstOne.get_query({"@limit": 1})
        assert query.table.source == "first_one"
        assert query.table.alias == "fo"


class TestInsertAndSelect:
    def test_insert_backfills_id(self, sqlite_db):
        item = Item(name="a", value=1)
        result = Item.insert(item, ["name", "value"])
        assert result.num_rows == 1
        assert item.id == 1

        second = Item(name="b")
        Item.insert(second, ["name"])
        assert second.id == 2

    def test_insert_many_backfills_ids(self, sqlite_db):
        Item.insert(Item(name="first"), ["name"])
        items = [Item(name="a", tag="x"), Item(name="b", tag="y"), Item(name="c", tag="x")]
        result = Item.insert_many(items, ["name", "tag"])
        assert result.num_rows == 3
        assert [i.id for i in items] == [2, 3, 4]

        stored = {row.name: row.id for row in Item.get_rows()}
        assert stored == {"first": 1, "a": 2, "b": 3, "c": 4}

    def test_get_rows_filters(self, sqlite_db):
        Item.insert_many(
            [
                Item(name="a", value=1, tag="x"),
                Item(name="b", value=5, tag="y"),
                Item(name="c", value=9, tag="z"),
            ],
            ["name", "value", "tag"],
        )
        rows = Item.get_rows({"min_value": 5, "tags": ["y", "z"], "@orderBy": "-value"})
        assert [r.name for r in rows] == ["c", "b"]
        assert rows[0] == Item(id=3, name="c", value=9, tag="z")

    def test_get_rows_paginates(self, sqlite_db):
        Item.insert_many([Item(name=str(n)) for n in range(5)], ["name"])
        page = Item.get_rows({"@orderBy": "id", "@page": 2, "@pageSize": 2})
        assert [r.id for r in page] == [3, 4]
        limited = Item.get_rows({"@orderBy": "id", "@limit": 2, "@offset": 3})
        assert [r.id for r in limited] == [4, 5]

    def test_first_last_and_empty(self, sqlite_db):
        assert Item.get_first() is None
        assert Item.get_last() is None

        Item.insert_many([Item(name="a"), Item(name="b")], ["name"])
        assert Item.get_first({"@orderBy": "id"}).name == "a"
        assert Item.get_last({"@orderBy": "id"}).name == "b"

    def test_unused_params(self, sqlite_db):
        with pytest.raises(UnusedParamsError) as exc_info:
            Item.get_rows({"name": "a", "colour": "red"})
        assert exc_info.value.params == ["colour"]


class TestUpdateUpsertDelete:
    @pytest.fixture
    def items(self, sqlite_db):
        items = [Item(name="a", value=1, tag="x"), Item(name="b", value=2, tag="y")]
        Item.insert_many(items, ["name", "value", "tag"])
        return items

    def test_update(self, items):
        first = items[0]
        first.value = 100
        result = Item.update(first, ["id"], ["value"])
        assert result.num_rows == 1
        assert Item.get_first({"name": "a"}).value == 100
        assert Item.get_first({"name": "b"}).value == 2

    def test_upsert_updates_existing(self, items):
        result = Item.upsert(Item(name="a", value=7), ["name"], ["value"])
        assert result.num_rows == 1
        assert result.get_inserts() == []
        assert Item.get_first({"name": "a"}).value == 7

    def test_upsert_inserts_and_backfills(self, items):
        new = Item(name="c", value=3)
        result = Item.upsert(new, ["name"], ["value"])
        assert result.get_inserts() == [new]
        assert new.id == 3
        assert Item.get_first({"name": "c"}).value == 3

    def test_upsert_insert_only_keeps_existing(self, items):
        result = Item.upsert(Item(name="a", value=50), ["name"])
        assert result.num_rows == 0
        assert Item.get_first({"name": "a"}).value == 1

    def test_upsert_many(self, items):
        existing, new = Item(name="b", value=20), Item(name="d", value=4)
        result = Item.upsert_many([existing, new], ["name"], ["value"])
        assert result.updates == [existing]
        assert result.inserts == [new]
        assert new.id == 3
        assert not hasattr(existing, "id")
        values = {r.name: r.value for r in Item.get_rows()}
        assert values == {"a": 1, "b": 20, "d": 4}

    def test_delete(self, items):
        result = Item.delete({"tag": "x"})
        assert result.num_rows == 1
        assert [r.name for r in Item.get_rows()] == ["b"]

    def test_delete_everything(self, items):
        assert Item.delete({}).num_rows == 2
        assert Item.get_rows() == []

    def test_sql_in_order_by_rejected(self, items):
        order = (
            "(CASE WHEN (SELECT count(*) FROM sqlite_master WHERE name='items')>0 "
            "THEN i.id ELSE -i.id END)"
        )
        with pytest.raises(ValueError, match="Invalid column name"):
            Item.get_rows({"@orderBy": order})

    def test_sql_in_delete_filter_rejected(self, items):
        with pytest.raises(ValueError, match="Invalid column name"):
            Item.delete({"items.name = 'zzz' OR 1": 1})
        assert len(Item.get_rows()) == 2

    def test_qualified_order_by(self, items):
        assert [r.name for r in Item.get_rows({"@orderBy": "-i.id"})] == ["b", "a"]


class TestCompositeKeyAndProtocolModels:
    def test_composite_key_insert(self, sqlite_db):
        member = Membership(user_id=1, group_id=2, role="admin")
        Membership.insert(member, ["user_id", "group_id", "role"])
        assert member.user_id == 1
        assert Membership.get_rows() == [Membership(user_id=1, group_id=2, role="admin")]

    def test_dataclass_model_through_operations(self, sqlite_db):
        note = Note(body="hello")
        ModelOperations.insert(Note, note, ["body"])
        assert note.id == 1
        assert ModelOperations.get_rows(Note) == [Note(id=1, body="hello")]

        upserted = Note(body="world")
        ModelOperations.upsert(Note, upserted, ["body"])
        assert upserted.id == 2
