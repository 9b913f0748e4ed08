"""Nested grouping of result rows by one or more fields."""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from pydantic import Field

from harborops.core.db import CamelModel
from harborops.core.modules.filter.models import GroupByItem, SortDirection

NULL_GROUP_KEY = "__null__"
NULL_GROUP_LABEL = "(Unassigned)"


class GroupNode(CamelModel):
    """One bucket of rows sharing a value for a grouping field."""

    key: str = Field(..., description="Stable bucket key, __null__ for missing values")
    field: str = Field(..., description="Field key this level groups by")
    value: Any = Field(None, description="Shared field value")
    label: str = Field(..., description="Display label")
    count: int = Field(..., description="Rows in this bucket across all pages", ge=0)
    items: list[dict[str, Any]] | None = Field(None, description="Rows, only on leaf groups")
    subgroups: list["GroupNode"] | None = Field(None, description="Next grouping level")


def get_row_value(row: dict[str, Any], key: str) -> Any:
    """Read a possibly dotted key from a row, None when any segment is missing."""
    value: Any = row
    for segment in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(segment)
    return value


def _bucket_key(value: Any) -> str:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _group_label(value: Any) -> str:
    if value is None:
        return NULL_GROUP_LABEL
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, dict):
        for display_key in ("name", "title", "email"):
            if value.get(display_key):
                return str(value[display_key])
    return _bucket_key(value)


def _sort_groups(groups: list[GroupNode], direction: SortDirection) -> list[GroupNode]:
    """Order buckets by value; the null bucket is always last."""
    present = [group for group in groups if group.key != NULL_GROUP_KEY]
    missing = [group for group in groups if group.key == NULL_GROUP_KEY]
    reverse = direction == SortDirection.DESC
    try:
        present.sort(key=lambda group: group.value, reverse=reverse)
    except TypeError:
        # Mixed or unordered values compare as strings
        present.sort(key=lambda group: _bucket_key(group.value), reverse=reverse)
    return present + missing


def group_rows(rows: Sequence[dict[str, Any]], group_by: Sequence[GroupByItem]) -> list[GroupNode]:
    """Partition rows into nested groups, first item is the outermost level.

    Rows keep their incoming order inside a bucket. Only the innermost
    level carries items.
    """
    if not group_by:
        return []

    level, rest = group_by[0], group_by[1:]
    buckets: dict[str, tuple[Any, list[dict[str, Any]]]] = {}
    for row in rows:
        value = get_row_value(row, level.key)
        if value is None or value == "":
            bucket_key, value = NULL_GROUP_KEY, None
        else:
            bucket_key = _bucket_key(value)
        buckets.setdefault(bucket_key, (value, []))[1].append(row)

    groups = []
    for bucket_key, (value, members) in buckets.items():
        groups.append(
            GroupNode(
                key=bucket_key,
                field=level.key,
                value=value,
                label=_group_label(value),
                count=len(members),
                items=None if rest else members,
                subgroups=group_rows(members, rest) if rest else None,
            )
        )
    return _sort_groups(groups, level.direction)


def paginate_groups(groups: Sequence[GroupNode], page: int, limit: int) -> list[GroupNode]:
    """Apply row pagination inside every leaf group, counts stay unpaged."""
    start = (page - 1) * limit
    paged = []
    for group in groups:
        if group.subgroups is not None:
            paged.append(group.model_copy(update={"subgroups": paginate_groups(group.subgroups, page, limit)}))
        else:
            paged.append(group.model_copy(update={"items": (group.items or [])[start : start + limit]}))
    return paged
