"""
Bidirectional mapping between documents and entity instances.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from esodm.core import debug
from esodm.core.exceptions import MappingError
from esodm.document import Document, SearchDocument, SeqNoPrimaryTerm
from esodm.query import (
    Criteria,
    CriteriaEntry,
    CriteriaQuery,
    FieldType,
    Query,
    SourceFilter,
)

from ._conversions import ConversionRegistry
from ._metadata import MappingContext, PersistentEntity, PersistentProperty
from ._type_info import TypeInformation, is_collection_type, is_map_type

T = TypeVar("T")

DEFAULT_TYPE_KEY = "_class"

_OBJECT = TypeInformation(object)
_UPDATED_ATTRIBUTE = "_esodm_updated"


class EntityConverter:
    """Reads entities from documents and writes them back.

    Args:
        mapping_context: Entity metadata cache.
        conversions: Custom value conversions.
        write_type_hints: Write the type hint field at all.
        type_key: Name of the type hint field.
    """

    mapping_context: MappingContext
    conversions: ConversionRegistry
    write_type_hints: bool
    type_key: str

    def __init__(
        self,
        mapping_context: MappingContext | None = None,
        conversions: ConversionRegistry | None = None,
        write_type_hints: bool = True,
        type_key: str = DEFAULT_TYPE_KEY,
    ) -> None:
        self.mapping_context = mapping_context or MappingContext()
        self.conversions = conversions or ConversionRegistry()
        self.write_type_hints = write_type_hints
        self.type_key = type_key

    # ----------------------------------------
    # Read
    # ----------------------------------------

    def read(self, entity_type: type[T], document: Mapping | None) -> T:
        if document is None:
            return None  # type: ignore[return-value]
        if not self.mapping_context.is_entity_type(entity_type):
            if isinstance(entity_type, type) and issubclass(
                entity_type, Mapping
            ):
                return document  # type: ignore[return-value]
            raise MappingError(f"Cannot read {entity_type!r} from document")

        target = self._read_type(document, entity_type)
        entity = self.mapping_context.get_entity(target)

        values: dict[str, Any] = {}
        for property in entity.properties:
            if (
                property.is_score
                or property.is_seq_no_primary_term
                or property.is_scripted_field
            ):
                continue
            if property.field_name in document:
                values[property.name] = self._read_property(
                    property, document[property.field_name]
                )
            elif property.required:
                values[property.name] = None

        if isinstance(document, Document):
            self._read_metadata(entity, document, values)
        return target.model_construct(**values)  # type: ignore[return-value]

    def _read_metadata(
        self,
        entity: PersistentEntity,
        document: Document,
        values: dict[str, Any],
    ) -> None:
        id_property = entity.id_property
        if (
            document.has_id()
            and id_property is not None
            and id_property.actual_type in (str, object)
        ):
            values[id_property.name] = document.get_id()

        if document.has_version():
            version = document.get_version()
            version_property = entity.version_property
            if version_property is not None:
                if version == -1:
                    raise MappingError(
                        f"Version value of -1 is not allowed for "
                        f"{entity.type.__name__}"
                    )
                values[version_property.name] = version

        seq_no_property = entity.seq_no_primary_term_property
        if (
            seq_no_property is not None
            and document.has_seq_no()
            and document.has_primary_term()
        ):
            seq_no = document.get_seq_no()
            primary_term = document.get_primary_term()
            if seq_no >= 0 and primary_term > 0:
                values[seq_no_property.name] = SeqNoPrimaryTerm(
                    seq_no=seq_no, primary_term=primary_term
                )

        if isinstance(document, SearchDocument):
            if entity.score_property is not None:
                values[entity.score_property.name] = document.score
            for property in entity.properties:
                name = property.scripted_field_name
                if name is None or name not in document.fields:
                    continue
                value = document.fields[name]
                if isinstance(value, list) and len(value) == 1:
                    value = value[0]
                values[property.name] = self._read_property(property, value)

    def _read_type(self, source: Mapping, declared: type) -> type:
        alias = source.get(self.type_key)
        if not isinstance(alias, str):
            return declared
        hinted = self.mapping_context.get_type_for_alias(alias)
        if hinted is None:
            debug("Ignoring unknown type hint %s", alias)
            return declared
        if declared is object or (
            isinstance(hinted, type)
            and isinstance(declared, type)
            and issubclass(hinted, declared)
        ):
            return hinted
        return declared

    def _read_property(self, property: PersistentProperty, value: Any) -> Any:
        if value is None:
            return None
        if property.converter is not None:
            if isinstance(value, list):
                return [property.converter.read(v) for v in value]
            return property.converter.read(value)
        return self._read_value(value, property.type_information)

    def _read_value(self, value: Any, info: TypeInformation) -> Any:
        if value is None:
            return None
        tp = info.type

        if not info.is_collection_like and not info.is_map:
            if tp is not object and self.conversions.has_custom_read_target(
                tp
            ):
                return self.conversions.read(value, tp)

        if info.is_collection_like:
            if not isinstance(value, (list, tuple, set, frozenset)):
                value = [value]
            component = info.component or _OBJECT
            return tp(self._read_value(v, component) for v in value)

        if isinstance(value, Mapping):
            if info.is_map:
                map_value = info.map_value or _OBJECT
                return {
                    k: self._read_value(v, map_value) for k, v in value.items()
                }
            if self.mapping_context.is_entity_type(tp):
                return self.read(tp, Document(value))
            if tp is object:
                target = self._read_type(value, object)
                if self.mapping_context.is_entity_type(target):
                    return self.read(target, Document(value))
                return {
                    k: self._read_value(v, _OBJECT) for k, v in value.items()
                }
            return value

        if tp is object:
            if isinstance(value, list):
                return [self._read_value(v, _OBJECT) for v in value]
            return value
        if isinstance(tp, type) and issubclass(tp, Enum):
            return self._read_enum(tp, value)
        return self._read_simple(tp, value)

    @staticmethod
    def _read_enum(tp: type[Enum], value: Any) -> Enum:
        if isinstance(value, tp):
            return value
        try:
            return tp[str(value)]
        except KeyError:
            pass
        try:
            return tp(value)
        except ValueError as e:
            raise MappingError(
                f"{value!r} is not a member of {tp.__name__}"
            ) from e

    @staticmethod
    def _read_simple(tp: type, value: Any) -> Any:
        if isinstance(value, tp):
            return value
        if tp is bool and isinstance(value, str):
            return value.lower() == "true"
        if tp in (str, int, float):
            try:
                return tp(value)
            except (TypeError, ValueError) as e:
                raise MappingError(
                    f"Cannot read {tp.__name__} from {value!r}"
                ) from e
        return value

    # ----------------------------------------
    # Write
    # ----------------------------------------

    def write(self, source: Any, sink: Document | None = None) -> Document:
        if sink is None:
            sink = Document()
        if source is None:
            return sink
        if isinstance(source, Mapping):
            for key, value in source.items():
                sink[key] = self._write_value(value, _OBJECT)
            return sink
        if not isinstance(source, BaseModel):
            raise MappingError(f"Cannot write {type(source).__name__}")

        entity = self.mapping_context.get_entity(type(source))
        if (
            self.write_type_hints
            and entity.write_type_hint
            and self.requires_type_hint(entity.type, type(source))
        ):
            sink[self.type_key] = entity.type_alias
        self._write_properties(entity, source, sink)
        return sink

    def map_object(self, source: Any) -> Document:
        return self.write(source, Document())

    def _write_entity(
        self, value: BaseModel, container: TypeInformation | None
    ) -> dict[str, Any]:
        entity = self.mapping_context.get_entity(type(value))
        target: dict[str, Any] = {}
        if (
            self.write_type_hints
            and entity.write_type_hint
            and self.requires_type_hint(entity.type, type(value), container)
        ):
            target[self.type_key] = entity.type_alias
        self._write_properties(entity, value, target)
        return target

    def _write_properties(
        self,
        entity: PersistentEntity,
        source: BaseModel,
        sink: Any,
    ) -> None:
        for property in entity.properties:
            if not property.is_writable:
                continue
            value = getattr(source, property.name, None)
            if value is None:
                if property.store_null_value:
                    sink[property.field_name] = None
                continue
            sink[property.field_name] = self._write_property(property, value)

    def _write_property(self, property: PersistentProperty, value: Any) -> Any:
        if property.converter is not None:
            if isinstance(value, (list, tuple, set, frozenset)):
                return [property.converter.write(v) for v in value]
            return property.converter.write(value)
        return self._write_value(value, property.type_information)

    def _write_value(self, value: Any, info: TypeInformation) -> Any:
        if value is None:
            return None
        if self.conversions.has_custom_write_target(type(value)):
            return self.conversions.write(value)
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, (str, int, float, bool, bytes)):
            return value

        if isinstance(value, Mapping):
            map_value = info.map_value or _OBJECT
            return {
                k: self._write_value(v, map_value) for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            if not info.is_collection_like:
                info = TypeInformation(list, component=_OBJECT)
            component = info.component or _OBJECT
            return [self._write_value(v, component) for v in value]
        if isinstance(value, BaseModel):
            return self._write_entity(value, info)
        return value

    def requires_type_hint(
        self,
        tp: type,
        actual_type: type,
        container: TypeInformation | None = None,
    ) -> bool:
        """Whether a type hint must be written for a value.

        The hint is skipped when the declared type of the containing
        collection element, map value or property already names the
        runtime type, and for simple, collection and converted types.
        """
        if container is not None:
            if container.is_collection_like and container.component:
                if container.component.type is tp and tp is actual_type:
                    return False
            if container.is_map and container.map_value:
                if container.map_value.type is tp and tp is actual_type:
                    return False
            if (
                not container.is_collection_like
                and not container.is_map
                and container.type is tp
                and tp is actual_type
            ):
                return False
        return (
            not self.conversions.is_simple_type(tp)
            and not is_collection_type(tp)
            and not is_map_type(tp)
            and not self.conversions.has_custom_write_target(tp)
        )

    # ----------------------------------------
    # Query support
    # ----------------------------------------

    def get_field_name(self, entity_type: type | None, name: str) -> str:
        """Mapped field name of a property, or the name unchanged.

        Dotted paths are resolved segment by segment through nested
        entities.
        """
        field_name, _, _ = self._resolve_path(entity_type, name)
        return field_name

    def _resolve_path(
        self, entity_type: type | None, name: str
    ) -> tuple[str, PersistentProperty | None, str | None]:
        entity = self.mapping_context.get_required_entity(entity_type)
        if entity is None:
            return name, None, None

        segments = name.split(".")
        resolved: list[str] = []
        nested_path: str | None = None
        property: PersistentProperty | None = None
        for i, segment in enumerate(segments):
            property = (
                entity.get_property(segment) if entity is not None else None
            )
            if property is None:
                resolved.extend(segments[i:])
                return ".".join(resolved), None, nested_path
            resolved.append(property.field_name)
            if property.field_type == FieldType.NESTED:
                nested_path = ".".join(resolved)
            entity = self.mapping_context.get_required_entity(
                property.actual_type
            )
        return ".".join(resolved), property, nested_path

    def update_query(self, query: Query, entity_type: type | None) -> None:
        """Rewrite property names of a query to document field names.

        Criteria fields get their mapped name, field type and nested
        path, and criteria values go through the property converter.
        A criteria is updated only once.
        """
        if entity_type is None or not self.mapping_context.is_entity_type(
            entity_type
        ):
            return

        if query.fields:
            query.fields = [
                self.get_field_name(entity_type, f) for f in query.fields
            ]
        if query.stored_fields:
            query.stored_fields = [
                self.get_field_name(entity_type, f)
                for f in query.stored_fields
            ]
        if query.source_filter is not None:
            query.source_filter = SourceFilter(
                includes=[
                    self.get_field_name(entity_type, f)
                    for f in query.source_filter.includes or []
                ]
                or None,
                excludes=[
                    self.get_field_name(entity_type, f)
                    for f in query.source_filter.excludes or []
                ]
                or None,
            )

        if isinstance(query, CriteriaQuery):
            self._update_criteria(query.criteria, entity_type, set())

    def _update_criteria(
        self, criteria: Criteria, entity_type: type, seen: set[int]
    ) -> None:
        for node in criteria.criteria_chain or [criteria]:
            if id(node) in seen:
                continue
            seen.add(id(node))
            if not getattr(node, _UPDATED_ATTRIBUTE, False):
                self._update_node(node, entity_type)
                setattr(node, _UPDATED_ATTRIBUTE, True)
            for sub in node.sub_criteria:
                self._update_criteria(sub, entity_type, seen)

    def _update_node(self, node: Criteria, entity_type: type) -> None:
        field = node.field
        if field is None or not field.name:
            return
        field_name, property, nested_path = self._resolve_path(
            entity_type, field.name
        )
        field.name = field_name
        if property is None:
            return
        if property.field_type != FieldType.AUTO:
            field.field_type = property.field_type
        if nested_path is not None and nested_path != field_name:
            field.path = nested_path
        if property.converter is not None:
            node.query_criteria_entries = [
                self._convert_entry(entry, property)
                for entry in node.query_criteria_entries
            ]

    @staticmethod
    def _convert_entry(
        entry: CriteriaEntry, property: PersistentProperty
    ) -> CriteriaEntry:
        if not entry.key.has_value() or entry.value is None:
            return entry
        converter = property.converter
        if converter is None:
            raise MappingError(
                f"Property {property.name} has no value converter"
            )
        value = entry.value
        if isinstance(value, (list, tuple)):
            value = [
                converter.write(v) if v is not None else None for v in value
            ]
        else:
            value = converter.write(value)
        return CriteriaEntry(entry.key, value)
