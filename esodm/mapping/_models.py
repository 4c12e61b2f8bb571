from __future__ import annotations

from typing import Any, Callable, TypeVar

from esodm.query import FieldType

T = TypeVar("T", bound=type)


class PropertyValueConverter:
    """Converts one property between its entity and document forms."""

    def write(self, value: Any) -> Any:
        raise NotImplementedError

    def read(self, value: Any) -> Any:
        raise NotImplementedError


class Mapped:
    """Mapping options of an entity property.

    Used as ``Annotated`` metadata on a model field, for example
    ``name: Annotated[str, Mapped("full_name", FieldType.KEYWORD)]``.

    Attributes:
        name: Field name in the document, defaults to the property name.
        type: Field type in the index.
        converter: Converter applied to the value on read and write.
        store_null_value: Write the field even when the value is None.
        read_only: Read from documents but never written.
    """

    __slots__ = ("name", "type", "converter", "store_null_value", "read_only")

    def __init__(
        self,
        name: str | None = None,
        type: FieldType = FieldType.AUTO,
        converter: PropertyValueConverter | None = None,
        store_null_value: bool = False,
        read_only: bool = False,
    ) -> None:
        self.name = name
        self.type = type
        self.converter = converter
        self.store_null_value = store_null_value
        self.read_only = read_only

    def __repr__(self) -> str:
        return f"Mapped(name={self.name!r}, type={self.type.value!r})"


class Id:
    """Marks the document id property."""


class Version:
    """Marks the document version property."""


class Score:
    """Marks the property receiving the search score."""


class ScriptedField:
    """Marks a property filled from a script field of the search response.

    Attributes:
        name: Script field name, defaults to the field name.
    """

    __slots__ = ("name",)

    def __init__(self, name: str | None = None) -> None:
        self.name = name


class EntityOptions:
    """Entity level mapping options.

    Attributes:
        index: Index name the entity is stored in.
        type_alias: Value written in the type hint field.
        write_type_hint: Whether type hints are written for this entity.
    """

    __slots__ = ("index", "type_alias", "write_type_hint")

    def __init__(
        self,
        index: str | None = None,
        type_alias: str | None = None,
        write_type_hint: bool = True,
    ) -> None:
        self.index = index
        self.type_alias = type_alias
        self.write_type_hint = write_type_hint


ENTITY_OPTIONS_ATTRIBUTE = "__esodm_entity__"


def entity(
    index: str | None = None,
    type_alias: str | None = None,
    write_type_hint: bool = True,
) -> Callable[[T], T]:
    """Declare the index and type hint options of an entity class."""

    def decorator(cls: T) -> T:
        setattr(
            cls,
            ENTITY_OPTIONS_ATTRIBUTE,
            EntityOptions(
                index=index,
                type_alias=type_alias,
                write_type_hint=write_type_hint,
            ),
        )
        return cls

    return decorator
