"""
Criteria model.

A criteria is a node in a chain shared by all nodes created from it
through ``and_`` and ``or_``. Each node binds to one field and holds the
entries used to build query clauses and filter clauses for that field.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Iterable

from esodm.core.exceptions import ConfigurationError

from ._field import Field
from ._geo import GEOJSON_TYPES, Box, Distance, GeoBox, GeoPoint, Point


class OperationKey(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EXPRESSION = "expression"
    BETWEEN = "between"
    FUZZY = "fuzzy"
    MATCHES = "matches"
    MATCHES_ALL = "matches_all"
    IN = "in"
    NOT_IN = "not_in"
    WITHIN = "within"
    BBOX = "bbox"
    LESS = "less"
    LESS_EQUAL = "less_equal"
    GREATER = "greater"
    GREATER_EQUAL = "greater_equal"
    EXISTS = "exists"
    GEO_INTERSECTS = "geo_intersects"
    GEO_IS_DISJOINT = "geo_is_disjoint"
    GEO_WITHIN = "geo_within"
    GEO_CONTAINS = "geo_contains"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"

    def has_value(self) -> bool:
        return self not in (
            OperationKey.EXISTS,
            OperationKey.EMPTY,
            OperationKey.NOT_EMPTY,
        )


class CriteriaEntry:
    key: OperationKey
    value: Any

    def __init__(self, key: OperationKey, value: Any = None) -> None:
        self.key = key
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CriteriaEntry):
            return NotImplemented
        return self.key == other.key and self.value == other.value

    def __repr__(self) -> str:
        if not self.key.has_value():
            return f"CriteriaEntry({self.key.name})"
        return f"CriteriaEntry({self.key.name}, {self.value!r})"


class Criteria:
    """Chainable predicate on a field.

    Attributes:
        field: Field the criteria applies to, None for a pure group node.
        criteria_chain: Nodes joined with this one, shared between them.
        query_criteria_entries: Entries compiled into query clauses.
        filter_criteria_entries: Entries compiled into filter clauses.
        sub_criteria: Nested criteria combined by this node's flags.
        is_or: Node is OR-combined with its predecessor.
        is_negating: Node is negated.
        boost: Query boost, NaN when unset.
    """

    field: Field | None
    criteria_chain: list[Criteria]
    query_criteria_entries: list[CriteriaEntry]
    filter_criteria_entries: list[CriteriaEntry]
    sub_criteria: list[Criteria]
    is_or: bool
    is_negating: bool
    boost_value: float

    def __init__(
        self,
        field: str | Field | None = None,
        criteria_chain: list[Criteria] | None = None,
        is_or: bool = False,
    ) -> None:
        self.field = self._to_field(field)
        self.criteria_chain = (
            criteria_chain if criteria_chain is not None else []
        )
        self.query_criteria_entries = []
        self.filter_criteria_entries = []
        self.sub_criteria = []
        self.is_or = is_or
        self.is_negating = False
        self.boost_value = math.nan
        if self.field is not None or criteria_chain is not None:
            self.criteria_chain.append(self)

    @staticmethod
    def _to_field(field: str | Field | None) -> Field | None:
        if field is None:
            return None
        if isinstance(field, Field):
            return field
        if not field.strip():
            raise ConfigurationError("Field name must not be empty")
        return Field(name=field)

    @staticmethod
    def where(field: str | Field) -> Criteria:
        return Criteria(field)

    @staticmethod
    def and_group() -> Criteria:
        """Empty AND node, used as a container for sub criteria."""
        return Criteria()

    @staticmethod
    def or_group() -> Criteria:
        """Empty OR node, used as a container for sub criteria."""
        return Criteria(is_or=True)

    # ----------------------------------------
    # Chaining
    # ----------------------------------------

    def and_(self, field: str | Field | Criteria) -> Criteria:
        if isinstance(field, Criteria):
            return self._chain_copy(field, is_or=False)
        return Criteria(field, criteria_chain=self.criteria_chain)

    def or_(self, field: str | Field | Criteria) -> Criteria:
        if isinstance(field, Criteria):
            return self._chain_copy(field, is_or=True)
        return Criteria(
            field, criteria_chain=self.criteria_chain, is_or=True
        )

    def _chain_copy(self, criteria: Criteria, is_or: bool) -> Criteria:
        node = Criteria(
            criteria.field, criteria_chain=self.criteria_chain, is_or=is_or
        )
        node.query_criteria_entries.extend(criteria.query_criteria_entries)
        node.filter_criteria_entries.extend(criteria.filter_criteria_entries)
        node.sub_criteria.extend(criteria.sub_criteria)
        node.is_negating = criteria.is_negating
        node.boost_value = criteria.boost_value
        return node

    def add_sub_criteria(self, criteria: Criteria) -> Criteria:
        if criteria is None:
            raise ConfigurationError("Cannot add None criteria")
        self.sub_criteria.append(criteria)
        return self

    def not_(self) -> Criteria:
        self.is_negating = True
        return self

    def boost(self, boost: float) -> Criteria:
        if boost < 0:
            raise ConfigurationError("Boost must not be negative")
        self.boost_value = boost
        return self

    def is_empty(self) -> bool:
        return (
            not self.query_criteria_entries
            and not self.filter_criteria_entries
            and not self.sub_criteria
        )

    # ----------------------------------------
    # Query operators
    # ----------------------------------------

    def is_(self, value: Any) -> Criteria:
        return self._add_query(OperationKey.EQUALS, value)

    def exists(self) -> Criteria:
        return self._add_query(OperationKey.EXISTS)

    def empty(self) -> Criteria:
        return self._add_query(OperationKey.EMPTY)

    def not_empty(self) -> Criteria:
        return self._add_query(OperationKey.NOT_EMPTY)

    def contains(self, value: Any) -> Criteria:
        if isinstance(value, GEOJSON_TYPES):
            return self._add_filter(OperationKey.GEO_CONTAINS, value)
        self._assert_no_blank(value, True, True)
        return self._add_query(OperationKey.CONTAINS, value)

    def starts_with(self, value: str) -> Criteria:
        self._assert_no_blank(value, False, True)
        return self._add_query(OperationKey.STARTS_WITH, value)

    def ends_with(self, value: str) -> Criteria:
        self._assert_no_blank(value, True, False)
        return self._add_query(OperationKey.ENDS_WITH, value)

    def expression(self, value: str) -> Criteria:
        return self._add_query(OperationKey.EXPRESSION, value)

    def fuzzy(self, value: str) -> Criteria:
        return self._add_query(OperationKey.FUZZY, value)

    def matches(self, value: Any) -> Criteria:
        return self._add_query(OperationKey.MATCHES, value)

    def matches_all(self, value: Any) -> Criteria:
        return self._add_query(OperationKey.MATCHES_ALL, value)

    def in_(self, *values: Any) -> Criteria:
        return self._add_query(OperationKey.IN, self._to_list(values))

    def not_in(self, *values: Any) -> Criteria:
        return self._add_query(OperationKey.NOT_IN, self._to_list(values))

    def between(self, lower: Any, upper: Any) -> Criteria:
        if lower is None and upper is None:
            raise ConfigurationError("Range [* TO *] is not allowed")
        return self._add_query(OperationKey.BETWEEN, [lower, upper])

    def less_than(self, value: Any) -> Criteria:
        return self._add_query(OperationKey.LESS, self._required(value))

    def less_than_equal(self, value: Any) -> Criteria:
        return self._add_query(
            OperationKey.LESS_EQUAL, self._required(value)
        )

    def greater_than(self, value: Any) -> Criteria:
        return self._add_query(OperationKey.GREATER, self._required(value))

    def greater_than_equal(self, value: Any) -> Criteria:
        return self._add_query(
            OperationKey.GREATER_EQUAL, self._required(value)
        )

    # ----------------------------------------
    # Filter operators
    # ----------------------------------------

    def within(
        self,
        location: GeoPoint | Point | str | Any,
        distance: str | Distance | None = None,
    ) -> Criteria:
        """Geo distance filter, or geo shape WITHIN for a GeoJSON shape."""
        if isinstance(location, GEOJSON_TYPES) and distance is None:
            return self._add_filter(OperationKey.GEO_WITHIN, location)
        if location is None:
            raise ConfigurationError("Location value must not be None")
        if distance is None or (
            isinstance(distance, str) and not distance.strip()
        ):
            raise ConfigurationError("Distance value must not be empty")
        return self._add_filter(OperationKey.WITHIN, (location, distance))

    def bounded_by(self, *corners: GeoBox | Box | GeoPoint | str) -> Criteria:
        if len(corners) == 1:
            if not isinstance(corners[0], (GeoBox, Box)):
                raise ConfigurationError(
                    "Single argument of bounded_by must be a GeoBox or Box"
                )
        elif len(corners) == 2:
            if not (
                all(isinstance(c, GeoPoint) for c in corners)
                or all(isinstance(c, str) for c in corners)
            ):
                raise ConfigurationError(
                    "Both corners of bounded_by must be GeoPoint or text"
                )
        else:
            raise ConfigurationError(
                "bounded_by takes a GeoBox, a Box or two corners"
            )
        return self._add_filter(OperationKey.BBOX, tuple(corners))

    def intersects(self, shape: Any) -> Criteria:
        return self._add_filter(OperationKey.GEO_INTERSECTS, shape)

    def is_disjoint(self, shape: Any) -> Criteria:
        return self._add_filter(OperationKey.GEO_IS_DISJOINT, shape)

    # ----------------------------------------
    # Helpers
    # ----------------------------------------

    def _add_query(self, key: OperationKey, value: Any = None) -> Criteria:
        self.query_criteria_entries.append(CriteriaEntry(key, value))
        return self

    def _add_filter(self, key: OperationKey, value: Any) -> Criteria:
        if value is None:
            raise ConfigurationError(f"{key.name} value must not be None")
        self.filter_criteria_entries.append(CriteriaEntry(key, value))
        return self

    @staticmethod
    def _required(value: Any) -> Any:
        if value is None:
            raise ConfigurationError("Value must not be None")
        return value

    @staticmethod
    def _to_list(values: tuple) -> Any:
        if len(values) == 1 and isinstance(values[0], Iterable):
            if not isinstance(values[0], (str, bytes, dict)):
                return list(values[0])
        return list(values)

    @staticmethod
    def _assert_no_blank(value: Any, leading: bool, trailing: bool) -> None:
        if value is not None and any(c.isspace() for c in str(value)):
            query = (
                ("*" if leading else "")
                + f'"{value}"'
                + ("*" if trailing else "")
            )
            raise ConfigurationError(
                f"Cannot construct query {query}. "
                "Use expression or multiple clauses instead."
            )

    def __repr__(self) -> str:
        parts = []
        for node in self.criteria_chain or [self]:
            prefix = "OR " if node.is_or else ""
            prefix += "NOT " if node.is_negating else ""
            parts.append(
                f"{prefix}{node.field}"
                f"{node.query_criteria_entries + node.filter_criteria_entries}"
            )
        return f"Criteria({' '.join(parts)})"
