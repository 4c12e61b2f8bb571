from ._conversions import (
    ConversionRegistry,
    DateConverter,
    DatetimeConverter,
)
from ._converter import DEFAULT_TYPE_KEY, EntityConverter
from ._metadata import MappingContext, PersistentEntity, PersistentProperty
from ._models import (
    EntityOptions,
    Id,
    Mapped,
    PropertyValueConverter,
    Score,
    ScriptedField,
    Version,
    entity,
)
from ._type_info import TypeInformation

__all__ = [
    "ConversionRegistry",
    "DEFAULT_TYPE_KEY",
    "DateConverter",
    "DatetimeConverter",
    "EntityConverter",
    "EntityOptions",
    "Id",
    "MappingContext",
    "Mapped",
    "PersistentEntity",
    "PersistentProperty",
    "PropertyValueConverter",
    "Score",
    "ScriptedField",
    "TypeInformation",
    "Version",
    "entity",
]
