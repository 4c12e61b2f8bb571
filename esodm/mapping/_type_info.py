from __future__ import annotations

import collections.abc
import types
import typing
from typing import Any, Union, get_args, get_origin

_COLLECTION_TYPES = (list, tuple, set, frozenset)
_ABSTRACT_SEQUENCES = (
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_ABSTRACT_SETS = (collections.abc.Set, collections.abc.MutableSet)
_ABSTRACT_MAPS = (collections.abc.Mapping, collections.abc.MutableMapping)


class TypeInformation:
    """Resolved shape of a declared type.

    Attributes:
        type: Raw type, ``object`` for ``Any`` and multi type unions.
        component: Element type of a collection.
        map_value: Value type of a map.
    """

    type: type
    component: TypeInformation | None
    map_value: TypeInformation | None

    def __init__(
        self,
        tp: Any,
        component: TypeInformation | None = None,
        map_value: TypeInformation | None = None,
    ) -> None:
        self.type = tp
        self.component = component
        self.map_value = map_value

    @staticmethod
    def of(annotation: Any) -> TypeInformation:
        if annotation is None or annotation is Any:
            return TypeInformation(object)

        origin = get_origin(annotation)
        if origin is typing.Annotated:
            return TypeInformation.of(get_args(annotation)[0])

        if origin in (Union, types.UnionType):
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                return TypeInformation.of(args[0])
            return TypeInformation(object)

        if origin is typing.Literal:
            return TypeInformation(type(get_args(annotation)[0]))

        args = get_args(annotation)
        tp = origin if origin is not None else annotation
        if not isinstance(tp, type):
            return TypeInformation(object)

        if _is_collection(tp):
            component = args[0] if args else Any
            return TypeInformation(
                _concrete_collection(tp),
                component=TypeInformation.of(component),
            )
        if _is_map(tp):
            value = args[1] if len(args) > 1 else Any
            return TypeInformation(dict, map_value=TypeInformation.of(value))
        return TypeInformation(tp)

    @property
    def is_collection_like(self) -> bool:
        return self.component is not None

    @property
    def is_map(self) -> bool:
        return self.map_value is not None

    @property
    def actual_type(self) -> type:
        if self.component is not None:
            return self.component.actual_type
        if self.map_value is not None:
            return self.map_value.actual_type
        return self.type

    def __repr__(self) -> str:
        if self.component is not None:
            return f"{self.type.__name__}[{self.component!r}]"
        if self.map_value is not None:
            return f"dict[str, {self.map_value!r}]"
        return getattr(self.type, "__name__", repr(self.type))


def is_collection_type(tp: Any) -> bool:
    return isinstance(tp, type) and _is_collection(tp)


def is_map_type(tp: Any) -> bool:
    return isinstance(tp, type) and _is_map(tp)


def _is_collection(tp: type) -> bool:
    if issubclass(tp, (str, bytes)):
        return False
    return (
        issubclass(tp, _COLLECTION_TYPES)
        or tp in _ABSTRACT_SEQUENCES
        or tp in _ABSTRACT_SETS
    )


def _is_map(tp: type) -> bool:
    return issubclass(tp, dict) or tp in _ABSTRACT_MAPS


def _concrete_collection(tp: type) -> type:
    if issubclass(tp, _COLLECTION_TYPES):
        return tp
    if tp in _ABSTRACT_SETS:
        return set
    return list
