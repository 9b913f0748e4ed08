"""Pure functions for building MongoDB queries from filter trees."""

import re
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from harborops import utils
from harborops.core.modules.field.models import FilterFieldMetadata, RelationType
from harborops.core.modules.filter.dates import normalize_date_bound, parse_date_value
from harborops.core.modules.filter.models import (
    LIST_OPERATORS,
    PATTERN_OPERATORS,
    ConditionType,
    FieldType,
    Filter,
    FilterCondition,
    FilterOperator,
    GroupByItem,
    OrderByItem,
    SortDirection,
    prune_empty_groups,
)
from harborops.core.modules.filter.validators import validate_filter_value
from harborops.errors import InvalidFieldError, InvalidOperatorError, InvalidValueError

FieldIndex = dict[str, FilterFieldMetadata]
SortSpec = list[tuple[str, int]]

# Mapping of filter operators to MongoDB query operators
_OPERATOR_MAPPING: dict[FilterOperator, str] = {
    FilterOperator.EQ: "$eq",
    FilterOperator.NE: "$ne",
    FilterOperator.GT: "$gt",
    FilterOperator.GTE: "$gte",
    FilterOperator.LT: "$lt",
    FilterOperator.LTE: "$lte",
    FilterOperator.IN: "$in",
    FilterOperator.NOT_IN: "$nin",
}

_DATE_TYPES = frozenset({FieldType.DATE, FieldType.DATETIME})


class QuerySpec(BaseModel):
    """Native query produced for one list request."""

    query: dict[str, Any] = Field(default_factory=dict, description="MongoDB filter document")
    sort: SortSpec = Field(default_factory=list, description="(path, direction) pairs in priority order")
    group_by: list[GroupByItem] = Field(default_factory=list, description="Validated grouping levels")


def index_fields(fields: Iterable[FilterFieldMetadata]) -> FieldIndex:
    return {field.key: field for field in fields}


def get_field_path(key: str) -> str:
    """Get the MongoDB document path for a field key.

    The `id` key maps to the primary key, every other key (dotted to-one
    relation keys included) is used as-is.
    """
    if key == "id":
        return "_id"
    return key


def resolve_field(key: str, fields: FieldIndex) -> FilterFieldMetadata:
    """Look up field metadata by key.

    Raises:
        InvalidFieldError: If the key is not a field of the resource
    """
    field = fields.get(key)
    if field is None:
        raise InvalidFieldError(f"Unknown filter field '{key}'")
    return field


def build_condition_query(operator: FilterOperator, value: Any, case_sensitive: bool = False) -> dict[str, Any]:
    """Build MongoDB query operator document for a single condition.

    Args:
        operator: The filter operator
        value: The normalized filter value
        case_sensitive: Match patterns case-sensitively

    Returns:
        MongoDB query operator document
    """
    if operator == FilterOperator.IS_NULL:
        return {"$eq": None}
    if operator == FilterOperator.IS_NOT_NULL:
        return {"$ne": None}

    if operator in PATTERN_OPERATORS:
        pattern = re.escape(str(value))
        if operator == FilterOperator.STARTS_WITH:
            pattern = f"^{pattern}"
        elif operator == FilterOperator.ENDS_WITH:
            pattern = f"{pattern}$"
        query: dict[str, Any] = {"$regex": pattern}
        if not case_sensitive:
            query["$options"] = "i"
        return query

    if operator == FilterOperator.BETWEEN:
        start, end = value
        return {"$gte": start, "$lte": end}

    mongo_op = _OPERATOR_MAPPING.get(operator)
    if mongo_op is None:
        raise ValueError(f"Operator {operator} not found in mapping - programming error")

    # One-element sets are plain (in)equality
    if operator in LIST_OPERATORS and len(value) == 1:
        return {"$eq" if operator == FilterOperator.IN else "$ne": value[0]}

    return {mongo_op: value}


def _is_whole_day(field: FilterFieldMetadata, operator: FilterOperator, value: Any, now: datetime) -> bool:
    if field.type not in _DATE_TYPES or operator not in (FilterOperator.EQ, FilterOperator.NE):
        return False
    if value is None or isinstance(value, list | dict):
        return False
    return parse_date_value(value, now)[1]


def _build_day_query(operator: FilterOperator, value: Any, now: datetime) -> dict[str, Any]:
    day = {
        "$gte": normalize_date_bound(value, FilterOperator.BETWEEN, now),
        "$lte": normalize_date_bound(value, FilterOperator.BETWEEN, now, is_end=True),
    }
    if operator == FilterOperator.NE:
        return {"$not": day}
    return day


def build_condition_clause(condition: FilterCondition, fields: FieldIndex, now: datetime) -> dict[str, Any]:
    """Build the MongoDB clause for one leaf, traversing relations.

    Fields behind a to-many relation match when at least one related
    document matches; to-one relations are embedded documents addressed by
    dotted path.

    Raises:
        InvalidFieldError: If the key is unknown
        InvalidOperatorError: If the operator is not allowed on the field
        InvalidValueError: If the value does not fit the field or operator
    """
    field = resolve_field(condition.key, fields)
    if condition.operator not in field.operators:
        raise InvalidOperatorError(
            f"Operator '{condition.operator}' is not valid for field '{field.key}' of type '{field.type}'"
        )

    if _is_whole_day(field, condition.operator, condition.value, now):
        operator_query = _build_day_query(condition.operator, condition.value, now)
    else:
        value = validate_filter_value(field, condition.operator, condition.value, now)
        operator_query = build_condition_query(condition.operator, value, bool(condition.case_sensitive))

    if field.relation is not None and field.relation_type == RelationType.MANY:
        return {field.relation: {"$elemMatch": {field.column: operator_query}}}
    return {get_field_path(field.key): operator_query}


def combine_queries(*queries: dict[str, Any] | None, operator: str = "$and") -> dict[str, Any]:
    """Combine query documents, dropping empty ones and unwrapping a single survivor."""
    parts = [query for query in queries if query]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {operator: parts}


def build_node_query(node: Filter, fields: FieldIndex, now: datetime) -> dict[str, Any]:
    """Build the MongoDB query for a filter subtree.

    A `not` group negates the conjunction of its children.

    Raises:
        InvalidValueError: If an empty group is reached, callers prune those first
    """
    if isinstance(node, FilterCondition):
        return build_condition_clause(node, fields, now)

    if not node.childs:
        raise InvalidValueError("Empty filter group cannot be translated")

    clauses = [build_node_query(child, fields, now) for child in node.childs]
    if node.condition == ConditionType.OR:
        return clauses[0] if len(clauses) == 1 else {"$or": clauses}
    conjunction = clauses[0] if len(clauses) == 1 else {"$and": clauses}
    if node.condition == ConditionType.NOT:
        return {"$nor": [conjunction]}
    return conjunction


def build_search_query(search: str | None, columns: Sequence[str]) -> dict[str, Any] | None:
    """Build a case-insensitive OR-of-contains over the searchable columns."""
    term = (search or "").strip()
    if not term or not columns:
        return None
    pattern = re.escape(term)
    clauses = [{get_field_path(column): {"$regex": pattern, "$options": "i"}} for column in columns]
    return combine_queries(*clauses, operator="$or")


def build_mongo_query(
    filter: Filter | None,
    fields: FieldIndex,
    search: str | None = None,
    search_columns: Sequence[str] = (),
    base_query: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build MongoDB query document from a filter tree and a search term.

    Args:
        filter: Root of the filter tree; None or an all-empty tree matches everything
        fields: Field metadata of the resource, by key
        search: Free-text search term
        search_columns: Columns the search term is matched against
        base_query: Query every result must satisfy (e.g. soft-delete exclusion)
        now: Reference moment for relative dates, defaults to the current time

    Returns:
        MongoDB query document; structured filter and search are ANDed
    """
    now = now or utils.now()
    filter = prune_empty_groups(filter)
    filter_query = build_node_query(filter, fields, now) if filter is not None else None
    return combine_queries(base_query, filter_query, build_search_query(search, search_columns))


def build_mongo_sort(order_by: Sequence[OrderByItem], fields: FieldIndex, default_sort: SortSpec) -> SortSpec:
    """Build MongoDB sort specification, first item is the primary key.

    Raises:
        InvalidFieldError: If a key is unknown or not sortable
    """
    if not order_by:
        return list(default_sort)

    sort_spec: SortSpec = []
    seen: set[str] = set()
    for item in order_by:
        field = resolve_field(item.key, fields)
        if not field.sortable:
            raise InvalidFieldError(f"Field '{item.key}' is not sortable")
        path = get_field_path(field.key)
        if path in seen:
            continue
        seen.add(path)
        sort_spec.append((path, -1 if item.direction == SortDirection.DESC else 1))
    return sort_spec


def validate_group_by(group_by: Sequence[GroupByItem], fields: FieldIndex) -> list[GroupByItem]:
    """Check grouping levels against field metadata.

    Raises:
        InvalidFieldError: If a key is unknown, not groupable or repeated
    """
    seen: set[str] = set()
    for item in group_by:
        field = resolve_field(item.key, fields)
        if not field.groupable:
            raise InvalidFieldError(f"Field '{item.key}' is not groupable")
        if item.key in seen:
            raise InvalidFieldError(f"Field '{item.key}' appears more than once in groupBy")
        seen.add(item.key)
    return list(group_by)


def translate(
    fields: FieldIndex,
    filter: Filter | None = None,
    search: str | None = None,
    order_by: Sequence[OrderByItem] = (),
    group_by: Sequence[GroupByItem] = (),
    *,
    search_columns: Sequence[str] = (),
    default_sort: SortSpec | None = None,
    base_query: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> QuerySpec:
    """Translate the complete filter state of a list request into a native query."""
    return QuerySpec(
        query=build_mongo_query(filter, fields, search, search_columns, base_query, now),
        sort=build_mongo_sort(order_by, fields, default_sort or [("createdAt", -1)]),
        group_by=validate_group_by(group_by, fields),
    )
