"""
Compiles criteria query entries into query DSL clauses.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from esodm.core.exceptions import ConfigurationError
from esodm.query import Criteria, CriteriaEntry, Field, FieldType
from esodm.query import OperationKey as Op

# query_string reserved characters
_ESCAPED_CHARS = set('\\+-!():^[]"{}~*?|&/')

# clause types that take their options inside the field object
_FIELD_KEYED = ("range", "wildcard", "fuzzy", "match", "prefix")


def escape(text: str) -> str:
    return "".join("\\" + c if c in _ESCAPED_CHARS else c for c in text)


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class CriteriaQueryProcessor:
    @staticmethod
    def create_query(criteria: Criteria) -> dict[str, Any] | None:
        """Compile the query entries of a criteria chain.

        Returns None when the criteria holds no query entries. A single
        MUST or SHOULD clause is returned without a bool envelope.
        """
        should: list[dict] = []
        must: list[dict] = []
        must_not: list[dict] = []

        first: dict | None = None
        negate_first = False
        for node in criteria.criteria_chain:
            fragment = CriteriaQueryProcessor._query_for_entries(node)
            if fragment is None:
                continue
            if first is None:
                first = fragment
                negate_first = node.is_negating
                continue
            if node.is_or:
                should.append(fragment)
            elif node.is_negating:
                must_not.append(fragment)
            else:
                must.append(fragment)

        for sub in criteria.sub_criteria:
            sub_query = CriteriaQueryProcessor.create_query(sub)
            if sub_query is None:
                continue
            if criteria.is_or:
                should.append(sub_query)
            elif criteria.is_negating:
                must_not.append(sub_query)
            else:
                must.append(sub_query)

        if first is not None:
            # a chain of ORs degrades to a flat should
            if should and not must and not must_not:
                should.insert(0, first)
            elif negate_first:
                must_not.insert(0, first)
            else:
                must.insert(0, first)

        if not should and not must and not must_not:
            return None
        if not must_not and len(should) + len(must) == 1:
            return (should or must)[0]

        bool_query: dict[str, Any] = {}
        if should:
            bool_query["should"] = should
        if must_not:
            bool_query["must_not"] = must_not
        if must:
            bool_query["must"] = must
        return {"bool": bool_query}

    @staticmethod
    def _query_for_entries(criteria: Criteria) -> dict[str, Any] | None:
        field = criteria.field
        if field is None or not criteria.query_criteria_entries:
            return None
        if not field.name:
            raise ConfigurationError(f"Unknown field in {criteria!r}")

        entries = criteria.query_criteria_entries
        if len(entries) == 1:
            query = CriteriaQueryProcessor._query_for(entries[0], field)
        else:
            query = {
                "bool": {
                    "must": [
                        CriteriaQueryProcessor._query_for(entry, field)
                        for entry in entries
                    ]
                }
            }

        add_boost(query, criteria.boost_value)

        if field.path:
            query = {
                "nested": {
                    "path": field.path,
                    "query": query,
                    "score_mode": "avg",
                }
            }
        return query

    @staticmethod
    def _query_for(entry: CriteriaEntry, field: Field) -> dict[str, Any]:
        name = field.name
        key = entry.key

        if key == Op.EXISTS:
            return {"exists": {"field": name}}
        if key == Op.EMPTY:
            return {
                "bool": {
                    "must": [{"exists": {"field": name}}],
                    "must_not": [{"wildcard": {name: {"value": "*"}}}],
                }
            }
        if key == Op.NOT_EMPTY:
            return {"wildcard": {name: {"value": "*"}}}

        value = entry.value
        if value is None:
            raise ConfigurationError(f"{key.name} on {name} needs a value")

        if key == Op.EQUALS:
            return _query_string(
                escape(to_text(value)), name, default_operator="and"
            )
        if key == Op.CONTAINS:
            return _query_string(
                f"*{escape(to_text(value))}*", name, analyze_wildcard=True
            )
        if key == Op.STARTS_WITH:
            return _query_string(
                f"{escape(to_text(value))}*", name, analyze_wildcard=True
            )
        if key == Op.ENDS_WITH:
            return _query_string(
                f"*{escape(to_text(value))}", name, analyze_wildcard=True
            )
        if key == Op.EXPRESSION:
            return _query_string(to_text(value), name)
        if key == Op.LESS:
            return {"range": {name: {"lt": value}}}
        if key == Op.LESS_EQUAL:
            return {"range": {name: {"lte": value}}}
        if key == Op.GREATER:
            return {"range": {name: {"gt": value}}}
        if key == Op.GREATER_EQUAL:
            return {"range": {name: {"gte": value}}}
        if key == Op.BETWEEN:
            lower, upper = value
            bounds = {}
            if lower is not None:
                bounds["gte"] = lower
            if upper is not None:
                bounds["lte"] = upper
            return {"range": {name: bounds}}
        if key == Op.FUZZY:
            return {"fuzzy": {name: {"value": escape(to_text(value))}}}
        if key == Op.MATCHES:
            return {
                "match": {name: {"query": to_text(value), "operator": "or"}}
            }
        if key == Op.MATCHES_ALL:
            return {
                "match": {name: {"query": to_text(value), "operator": "and"}}
            }
        if key in (Op.IN, Op.NOT_IN):
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise ConfigurationError(
                    f"{key.name} on {name} needs a list of values"
                )
            if field.field_type == FieldType.KEYWORD:
                terms = {
                    "terms": {
                        name: [
                            to_text(v) if v is not None else None
                            for v in value
                        ]
                    }
                }
                occur = "must" if key == Op.IN else "must_not"
                return {"bool": {occur: [terms]}}
            text = _or_query_string(value)
            if key == Op.NOT_IN:
                text = f"NOT({text})"
            return _query_string(text, name)

        raise ConfigurationError(f"{key.name} is not a query operation")


def add_boost(query: dict[str, Any], boost: float) -> None:
    if math.isnan(boost):
        return
    (clause_type, body), = query.items()
    if clause_type in _FIELD_KEYED:
        for options in body.values():
            options["boost"] = boost
    else:
        body["boost"] = boost


def _query_string(text: str, field: str, **options: Any) -> dict[str, Any]:
    return {"query_string": {"query": text, "fields": [field], **options}}


def _or_query_string(values: Any) -> str:
    return " ".join(
        f'"{escape(to_text(v))}"' for v in values if v is not None
    )
