"""Filter expression model: conditions, groups, ordering and grouping."""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from harborops.core.db import CamelModel
from harborops.errors import InvalidValueError


class FieldType(StrEnum):
    """Storage type of a filterable field."""

    INT = "INT"
    STRING = "STRING"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    DATETIME = "DATETIME"
    ARRAY = "ARRAY"
    JSON = "JSON"


class FilterOperator(StrEnum):
    """Query operators for filter conditions."""

    # Equality
    EQ = "eq"
    NE = "ne"

    # Ordering
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"  # inclusive [from, to]

    # Set membership
    IN = "in"
    NOT_IN = "notIn"

    # Text patterns
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"

    # Nullability, value ignored
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"


NULL_OPERATORS = frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})
LIST_OPERATORS = frozenset({FilterOperator.IN, FilterOperator.NOT_IN})
PATTERN_OPERATORS = frozenset({FilterOperator.CONTAINS, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH})
COMPARISON_OPERATORS = frozenset(
    {FilterOperator.GT, FilterOperator.GTE, FilterOperator.LT, FilterOperator.LTE, FilterOperator.BETWEEN}
)


class ConditionType(StrEnum):
    """How the children of a group combine."""

    AND = "and"
    OR = "or"
    NOT = "not"  # negation of the conjunction of all children


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class FilterCondition(CamelModel):
    """Leaf of a filter tree: one field compared with one value."""

    kind: Literal["condition"] = Field("condition", description="Node discriminator")
    key: str = Field(..., min_length=1, description="Field key, dotted to traverse a relation (e.g. service.name)")
    type: FieldType = Field(..., description="Field type the value is interpreted as")
    operator: FilterOperator = Field(..., description="Comparison operator")
    value: Any = Field(None, description="Operand, omitted for isNull/isNotNull; [from, to] for between")
    case_sensitive: bool | None = Field(None, description="Pattern operators are case-insensitive unless true")


class FilterGroup(CamelModel):
    """Branch of a filter tree combining child nodes."""

    # Force unified schema for both input/output in OpenAPI to avoid FilterGroup-Input/Output duplication
    model_config = ConfigDict(json_schema_mode_override="validation")

    kind: Literal["group"] = Field("group", description="Node discriminator")
    condition: ConditionType = Field(ConditionType.AND, description="Combinator for the children")
    childs: list["FilterNode"] = Field(default_factory=list, description="Child conditions and groups, in order")


def _node_kind(data: Any) -> str | None:
    """Pick the union member for a filter node.

    Explicit `kind` wins. Untagged payloads from older URLs and presets are
    groups when they carry `childs` and conditions otherwise.
    """
    if isinstance(data, BaseModel):
        return getattr(data, "kind", None)
    if isinstance(data, dict):
        kind = data.get("kind")
        if kind is not None:
            return str(kind)
        return "group" if "childs" in data else "condition"
    return None


FilterNode = Annotated[
    Annotated[FilterCondition, Tag("condition")] | Annotated[FilterGroup, Tag("group")],
    Discriminator(_node_kind),
]

# A filter tree is rooted at any node
Filter = FilterNode

FilterGroup.model_rebuild()


class OrderByItem(CamelModel):
    """One sort key; a list of these sorts by priority."""

    key: str = Field(..., min_length=1, description="Field key to sort by")
    type: FieldType | None = Field(None, description="Field type hint")
    direction: SortDirection = Field(SortDirection.ASC, description="Sort direction")


class GroupByItem(CamelModel):
    """One grouping level; the first item is the outermost group."""

    key: str = Field(..., min_length=1, description="Field key to group by")
    direction: SortDirection = Field(SortDirection.ASC, description="Order of the groups at this level")


_FILTER_ADAPTER = TypeAdapter(Filter)
_ORDER_BY_ADAPTER = TypeAdapter(list[OrderByItem])
_GROUP_BY_ADAPTER = TypeAdapter(list[GroupByItem])


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for detail in error.errors()[:3]:
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def parse_filter(data: Any) -> Filter:
    """Validate JSON data into a filter tree.

    Raises:
        InvalidValueError: If the data is not a well-formed condition or group
    """
    try:
        return _FILTER_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise InvalidValueError(f"Invalid filter: {_describe(e)}") from e


def parse_order_by(data: Any) -> list[OrderByItem]:
    """Validate JSON data into sort keys, a single item is wrapped into a list."""
    if isinstance(data, dict | OrderByItem):
        data = [data]
    try:
        return _ORDER_BY_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise InvalidValueError(f"Invalid orderBy: {_describe(e)}") from e


def parse_group_by(data: Any) -> list[GroupByItem]:
    """Validate JSON data into grouping levels."""
    if isinstance(data, dict | GroupByItem):
        data = [data]
    try:
        return _GROUP_BY_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise InvalidValueError(f"Invalid groupBy: {_describe(e)}") from e


def dump_filter(filter: Filter) -> dict[str, Any]:
    """Wire shape of a filter tree: camelCase keys, absent members omitted."""
    return filter.model_dump(mode="json", by_alias=True, exclude_none=True)


def is_condition_active(condition: FilterCondition) -> bool:
    """Whether a leaf carries enough to filter on."""
    if condition.operator in NULL_OPERATORS:
        return True
    value = condition.value
    return value is not None and value != ""


def has_active_filters(filter: Filter | None) -> bool:
    """Whether a filter tree would restrict anything.

    Args:
        filter: Root of the tree, or None

    Returns:
        False for None, for groups without any active descendant and for
        value-bearing conditions with no value; True otherwise
    """
    if filter is None:
        return False
    if isinstance(filter, FilterGroup):
        return any(has_active_filters(child) for child in filter.childs)
    return is_condition_active(filter)


def prune_empty_groups(filter: Filter | None) -> Filter | None:
    """Drop empty groups at any depth; None when nothing is left."""
    if filter is None or isinstance(filter, FilterCondition):
        return filter
    childs = [pruned for child in filter.childs if (pruned := prune_empty_groups(child)) is not None]
    if not childs:
        return None
    return filter.model_copy(update={"childs": childs})
