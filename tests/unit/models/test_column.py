import pytest
from pydantic import ValidationError

from tablemap.models.column import ColumnDefinition, ForeignKeyReference
from tablemap.models.declarations import column, foreign_key, primary_generated_column, primary_key
from tablemap.models.enums import ColumnType


def test_column_definition_defaults() -> None:
    definition = ColumnDefinition(type=ColumnType.STRING)

    assert definition.primary is False
    assert definition.nullable is True
    assert definition.unique is False
    assert definition.default is None
    assert definition.name is None
    assert definition.references is None


def test_column_definition_is_frozen() -> None:
    definition = ColumnDefinition(type=ColumnType.NUMBER)

    with pytest.raises(ValidationError):
        definition.primary = True  # type: ignore[misc]


def test_column_definition_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        ColumnDefinition(type="uuid")


def test_physical_name_prefers_override() -> None:
    assert ColumnDefinition(type=ColumnType.STRING, name="user_name").physical_name("userName") == "user_name"
    assert ColumnDefinition(type=ColumnType.STRING).physical_name("userName") == "userName"


def test_column_helper_accepts_string_type() -> None:
    definition = column("boolean", nullable=False, unique=True)

    assert definition.type is ColumnType.BOOLEAN
    assert definition.nullable is False
    assert definition.unique is True


def test_primary_key_helper_sets_primary() -> None:
    definition = primary_key(ColumnType.STRING, name="user_id")

    assert definition.primary is True
    assert definition.type is ColumnType.STRING
    assert definition.name == "user_id"


def test_primary_generated_column_defaults_to_serial_number() -> None:
    definition = primary_generated_column()

    assert definition.primary is True
    assert definition.type is ColumnType.NUMBER
    assert definition.default == "SERIAL"


def test_foreign_key_helper_builds_reference() -> None:
    definition = foreign_key("users", "id", name="user_id")

    assert definition.references == ForeignKeyReference(table="users", column="id")
    assert definition.name == "user_id"
    assert definition.primary is False


def test_column_accepts_reference_mapping() -> None:
    definition = column(ColumnType.NUMBER, references={"table": "teams", "column": "id"})

    assert definition.references is not None
    assert definition.references.table == "teams"


def test_blank_physical_name_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ColumnDefinition(type=ColumnType.STRING, name="   ")
