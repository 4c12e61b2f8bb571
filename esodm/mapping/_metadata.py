"""
Entity metadata resolved from pydantic model fields.
"""

from __future__ import annotations

import importlib
import threading
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from esodm.core import debug
from esodm.core.exceptions import MappingError
from esodm.document import SeqNoPrimaryTerm
from esodm.query import FieldType

from ._models import (
    ENTITY_OPTIONS_ATTRIBUTE,
    EntityOptions,
    Id,
    Mapped,
    PropertyValueConverter,
    Score,
    ScriptedField,
    Version,
)
from ._type_info import TypeInformation


class PersistentProperty:
    """Mapping metadata of one entity property.

    Attributes:
        name: Attribute name on the entity.
        field_name: Field name in the document.
        type_information: Resolved declared type.
        field_type: Field type in the index.
        converter: Property value converter.
        store_null_value: Write None values.
        read_only: Skip the property on write.
        is_id: Document id property.
        is_version: Document version property.
        is_score: Search score property.
        is_seq_no_primary_term: Sequence number and primary term property.
        scripted_field_name: Script field filling the property.
        required: Property has no default on the model.
    """

    def __init__(self, name: str, info: FieldInfo) -> None:
        self.name = name
        self.type_information = TypeInformation.of(info.annotation)
        self.required = info.is_required()

        mapped = _find_marker(info, Mapped)
        scripted = _find_marker(info, ScriptedField)
        self.field_name = (mapped.name if mapped else None) or (
            info.alias or name
        )
        self.field_type = mapped.type if mapped else FieldType.AUTO
        self.converter: PropertyValueConverter | None = (
            mapped.converter if mapped else None
        )
        self.store_null_value = mapped.store_null_value if mapped else False
        self.read_only = mapped.read_only if mapped else False
        self.is_id = _find_marker(info, Id) is not None
        self.is_version = _find_marker(info, Version) is not None
        self.is_score = _find_marker(info, Score) is not None
        self.is_seq_no_primary_term = (
            self.type_information.type is SeqNoPrimaryTerm
        )
        self.scripted_field_name = (
            (scripted.name or name) if scripted else None
        )

    @property
    def type(self) -> type:
        return self.type_information.type

    @property
    def actual_type(self) -> type:
        return self.type_information.actual_type

    @property
    def is_scripted_field(self) -> bool:
        return self.scripted_field_name is not None

    @property
    def is_writable(self) -> bool:
        return not (
            self.read_only
            or self.is_score
            or self.is_seq_no_primary_term
            or self.is_scripted_field
        )

    def __repr__(self) -> str:
        return (
            f"PersistentProperty({self.name!r}, "
            f"field_name={self.field_name!r})"
        )


class PersistentEntity:
    """Mapping metadata of an entity type."""

    type: type[BaseModel]
    properties: list[PersistentProperty]
    index: str | None
    type_alias: str
    write_type_hint: bool
    id_property: PersistentProperty | None
    version_property: PersistentProperty | None
    score_property: PersistentProperty | None
    seq_no_primary_term_property: PersistentProperty | None

    def __init__(self, type: type[BaseModel]) -> None:
        self.type = type
        self.properties = [
            PersistentProperty(name, info)
            for name, info in type.model_fields.items()
        ]
        self._by_name = {p.name: p for p in self.properties}
        self._by_field_name = {p.field_name: p for p in self.properties}

        options: EntityOptions | None = getattr(
            type, ENTITY_OPTIONS_ATTRIBUTE, None
        )
        # the alias is never inherited, subclasses get their own
        own_options = type.__dict__.get(ENTITY_OPTIONS_ATTRIBUTE)
        self.index = options.index if options else None
        self.write_type_hint = options.write_type_hint if options else True
        self.type_alias = (
            own_options.type_alias
            if own_options and own_options.type_alias
            else f"{type.__module__}.{type.__qualname__}"
        )

        self.id_property = self._single(lambda p: p.is_id)
        if self.id_property is None:
            self.id_property = self._by_name.get("id")
        self.version_property = self._single(lambda p: p.is_version)
        self.score_property = self._single(lambda p: p.is_score)
        self.seq_no_primary_term_property = self._single(
            lambda p: p.is_seq_no_primary_term
        )

    def _single(self, predicate) -> PersistentProperty | None:
        matches = [p for p in self.properties if predicate(p)]
        if len(matches) > 1:
            raise MappingError(
                f"{self.type.__name__} declares more than one "
                f"{matches[0].name!r} like property"
            )
        return matches[0] if matches else None

    def get_property(self, name: str) -> PersistentProperty | None:
        return self._by_name.get(name)

    def get_property_by_field_name(
        self, field_name: str
    ) -> PersistentProperty | None:
        return self._by_field_name.get(field_name)

    def has_seq_no_primary_term_property(self) -> bool:
        return self.seq_no_primary_term_property is not None

    def __repr__(self) -> str:
        return f"PersistentEntity({self.type.__name__})"


class MappingContext:
    """Cache of entity metadata and type alias registry."""

    def __init__(self) -> None:
        self._entities: dict[type, PersistentEntity] = {}
        self._aliases: dict[str, type] = {}
        self._lock = threading.Lock()

    @staticmethod
    def is_entity_type(tp: Any) -> bool:
        return isinstance(tp, type) and issubclass(tp, BaseModel)

    def get_entity(self, tp: type) -> PersistentEntity:
        entity = self._entities.get(tp)
        if entity is not None:
            return entity
        if not self.is_entity_type(tp):
            raise MappingError(f"{tp!r} is not an entity type")
        with self._lock:
            entity = self._entities.get(tp)
            if entity is None:
                entity = PersistentEntity(tp)
                self._entities[tp] = entity
                self._aliases[entity.type_alias] = tp
                debug("Resolved entity metadata for %s", tp.__name__)
        return entity

    def get_required_entity(self, tp: Any) -> PersistentEntity | None:
        if not self.is_entity_type(tp):
            return None
        return self.get_entity(tp)

    def register_alias(self, alias: str, tp: type) -> None:
        self._aliases[alias] = tp

    def get_type_for_alias(self, alias: str) -> type | None:
        """Type registered for an alias, or imported from its dotted path."""
        tp = self._aliases.get(alias)
        if tp is not None:
            return tp
        module_name, _, qualname = alias.rpartition(".")
        if not module_name:
            return None
        try:
            tp = importlib.import_module(module_name)
            for part in qualname.split("."):
                tp = getattr(tp, part)
        except (ImportError, AttributeError):
            debug("No type found for alias %s", alias)
            return None
        if not isinstance(tp, type):
            return None
        self._aliases[alias] = tp
        return tp


def _find_marker(info: FieldInfo, marker: type) -> Any:
    for item in info.metadata:
        if isinstance(item, marker):
            return item
    return None
