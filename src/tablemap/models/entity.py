"""Entity base class with snapshot-based change tracking.

An entity keeps a shallow snapshot of the values last known to be persisted.
``get_changes`` compares each declared column against that snapshot; values
that are the same object or compare equal are unchanged. Because the snapshot
is shallow, mutating a list or dict field in place is not reported as a
change; assign a new value instead.
"""

from collections.abc import Mapping
from typing import Any, ClassVar, Type, TypeVar

from tablemap.errors import UnknownColumnError
from tablemap.models.metadata import ModelMetadata, ModelRegistry, default_registry

T_Entity = TypeVar("T_Entity", bound="Entity")


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class Entity:
    """Base class for mapped models.

    Subclasses are registered with ``register_model`` or the ``model``
    decorator. Construction only accepts declared columns, addressed either
    by property name or by physical column name.
    """

    __registry__: ClassVar[ModelRegistry] = default_registry

    def __init__(self, data: Mapping[str, Any] | None = None, /, **fields: Any) -> None:
        values = self._normalize({**(data or {}), **fields})
        for property_name, value in values.items():
            setattr(self, property_name, value)
        self._original_values: dict[str, Any] = dict(values)

    @classmethod
    def get_metadata(cls) -> ModelMetadata:
        return cls.__registry__.require(cls)

    @classmethod
    def from_row(cls: Type[T_Entity], row: Mapping[str, Any]) -> T_Entity:
        """Build an entity from a database row keyed by physical column names."""
        return cls(row)

    @classmethod
    def _normalize(cls, values: Mapping[str, Any], strict: bool = True) -> dict[str, Any]:
        metadata = cls.get_metadata()
        normalized: dict[str, Any] = {}
        unknown: list[str] = []
        for key, value in values.items():
            property_name = metadata.property_for(key)
            if property_name is None:
                unknown.append(key)
            else:
                normalized[property_name] = value
        if unknown and strict:
            raise UnknownColumnError(cls.__name__, unknown)
        return normalized

    def assign(self, values: Mapping[str, Any], *, strict: bool = True) -> None:
        """Set declared columns from a mapping without touching the snapshot.

        With ``strict=False`` undeclared keys are ignored instead of raising
        ``UnknownColumnError``.
        """
        for property_name, value in self._normalize(values, strict).items():
            setattr(self, property_name, value)

    def to_dict(self) -> dict[str, Any]:
        """Return every declared column that currently has a value."""
        return {
            property_name: self.__dict__[property_name]
            for property_name in self.get_metadata().columns
            if self.__dict__.get(property_name, UNSET) is not UNSET
        }

    def get_changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for property_name in self.get_metadata().columns:
            current = self.__dict__.get(property_name, UNSET)
            if current is UNSET:
                continue
            original = self._original_values.get(property_name, UNSET)
            if current is original:
                continue
            if current != original:
                changes[property_name] = current
        return changes

    def original_value(self, property_name: str) -> Any:
        """Return the snapshot value of ``property_name``, or ``UNSET``."""
        return self._original_values.get(property_name, UNSET)

    def has_changes(self) -> bool:
        return bool(self.get_changes())

    def sync_original_values(self) -> None:
        for property_name in self.get_metadata().columns:
            current = self.__dict__.get(property_name, UNSET)
            if current is UNSET:
                self._original_values.pop(property_name, None)
            else:
                self._original_values[property_name] = current

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.to_dict().items())
        return f"{type(self).__name__}({fields})"
