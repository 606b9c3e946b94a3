import pytest

from tablemap.errors import MissingMetadataError, UnknownColumnError
from tablemap.models.declarations import column, model, primary_generated_column
from tablemap.models.entity import UNSET, Entity
from tablemap.models.enums import ColumnType


@model(
    "people",
    id=primary_generated_column(),
    firstName=column(ColumnType.STRING, name="first_name"),
    age=column(ColumnType.NUMBER),
    tags=column(ColumnType.ARRAY),
)
class Person(Entity):
    pass


@model("documents", id=primary_generated_column(), data=column(ColumnType.JSON))
class Document(Entity):
    pass


class Unregistered(Entity):
    pass


class TestEntityConstruction:
    def test_assigns_declared_properties(self) -> None:
        person = Person({"id": 1, "firstName": "Ada", "age": 36})

        assert person.id == 1
        assert person.firstName == "Ada"
        assert person.age == 36

    def test_accepts_keyword_fields(self) -> None:
        person = Person(firstName="Ada")

        assert person.firstName == "Ada"

    def test_physical_column_names_map_to_properties(self) -> None:
        person = Person.from_row({"id": 7, "first_name": "Grace"})

        assert person.firstName == "Grace"
        assert "first_name" not in vars(person)

    def test_unknown_keys_are_rejected(self) -> None:
        with pytest.raises(UnknownColumnError, match="Person has no declared column"):
            Person({"id": 1, "password_hash": "x"})

    def test_column_named_data_can_be_passed_by_keyword(self) -> None:
        document = Document(data={"k": 1})

        assert document.data == {"k": 1}
        assert document.to_dict() == {"data": {"k": 1}}

    def test_unregistered_model_raises(self) -> None:
        with pytest.raises(MissingMetadataError):
            Unregistered({"id": 1})

    def test_snapshot_is_a_shallow_copy(self) -> None:
        data = {"id": 1, "age": 30}
        person = Person(data)
        data["age"] = 99

        assert person.has_changes() is False

    def test_to_dict_skips_unset_fields(self) -> None:
        person = Person(firstName="Ada", age=None)

        assert person.to_dict() == {"firstName": "Ada", "age": None}

    def test_repr_lists_set_fields(self) -> None:
        assert repr(Person(id=1, firstName="Ada")) == "Person(id=1, firstName='Ada')"


class TestChangeTracking:
    def test_no_changes_after_construction(self) -> None:
        person = Person({"id": 1, "age": 30})

        assert person.get_changes() == {}
        assert person.has_changes() is False

    def test_detects_modified_column(self) -> None:
        person = Person({"id": 1, "firstName": "Ada", "age": 30})
        person.age = 31

        assert person.get_changes() == {"age": 31}

    def test_detects_newly_set_column(self) -> None:
        person = Person({"id": 1})
        person.firstName = "Ada"

        assert person.get_changes() == {"firstName": "Ada"}

    def test_setting_to_none_is_a_change(self) -> None:
        person = Person({"id": 1, "age": 30})
        person.age = None

        assert person.get_changes() == {"age": None}

    def test_equal_value_is_not_a_change(self) -> None:
        person = Person({"id": 1, "firstName": "Ada"})
        person.firstName = "".join(["A", "da"])

        assert person.has_changes() is False

    def test_get_changes_is_idempotent(self) -> None:
        person = Person({"id": 1, "age": 30})
        person.age = 40

        assert person.get_changes() == person.get_changes()

    def test_in_place_mutation_is_not_detected(self) -> None:
        person = Person({"id": 1, "tags": ["a"]})
        person.tags.append("b")

        assert person.has_changes() is False

    def test_replacing_collection_is_detected(self) -> None:
        person = Person({"id": 1, "tags": ["a"]})
        person.tags = ["a", "b"]

        assert person.get_changes() == {"tags": ["a", "b"]}

    def test_undeclared_attributes_are_ignored(self) -> None:
        person = Person({"id": 1})
        person.scratch = "temporary"

        assert person.has_changes() is False

    def test_sync_original_values_clears_changes(self) -> None:
        person = Person({"id": 1, "age": 30})
        person.age = 31
        person.firstName = "Ada"

        person.sync_original_values()

        assert person.has_changes() is False
        person.age = 32
        assert person.get_changes() == {"age": 32}

    def test_assign_does_not_touch_snapshot(self) -> None:
        person = Person({"id": 1, "age": 30})

        person.assign({"first_name": "Ada", "age": 30})

        assert person.firstName == "Ada"
        assert person.get_changes() == {"firstName": "Ada"}

    def test_assign_rejects_unknown_keys_by_default(self) -> None:
        person = Person({"id": 1})

        with pytest.raises(UnknownColumnError):
            person.assign({"created_at": "2024-05-01"})

    def test_lenient_assign_ignores_unknown_keys(self) -> None:
        person = Person({"id": 1})

        person.assign({"first_name": "Ada", "created_at": "2024-05-01"}, strict=False)

        assert person.firstName == "Ada"
        assert "created_at" not in vars(person)
        assert person.original_value("firstName") is UNSET

    def test_unset_sentinel_is_falsy_singleton(self) -> None:
        assert not UNSET
        assert repr(UNSET) == "UNSET"
        assert type(UNSET)() is UNSET
