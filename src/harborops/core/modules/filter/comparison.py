"""Order-insensitive structural comparison of filter trees."""

import json
from typing import Any

from harborops.core.modules.filter.models import (
    NULL_OPERATORS,
    Filter,
    FilterCondition,
    FilterOperator,
    has_active_filters,
    prune_empty_groups,
)


def _stable_key(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _normalize_value(value: Any) -> Any:
    if isinstance(value, list | tuple):
        return sorted((_normalize_value(item) for item in value), key=_stable_key)
    return value


def normalize_filter(filter: Filter | None) -> dict[str, Any] | None:
    """Canonical plain-data form of a filter tree.

    Set values and group children are sorted, null-test values and
    falsy case-sensitivity flags are dropped, empty groups are pruned.
    """
    filter = prune_empty_groups(filter)
    if filter is None:
        return None

    if isinstance(filter, FilterCondition):
        normalized: dict[str, Any] = {
            "key": filter.key,
            "type": str(filter.type),
            "operator": str(filter.operator),
        }
        if filter.operator == FilterOperator.BETWEEN:
            # Range bounds are positional
            normalized["value"] = filter.value
        elif filter.operator not in NULL_OPERATORS and filter.value is not None:
            normalized["value"] = _normalize_value(filter.value)
        if filter.case_sensitive:
            normalized["caseSensitive"] = True
        return normalized

    childs = [normalize_filter(child) for child in filter.childs]
    return {
        "condition": str(filter.condition),
        "childs": sorted(childs, key=_stable_key),
    }


def are_filters_equal(a: Filter | None, b: Filter | None) -> bool:
    """Structural equality ignoring child and array-value order; inactive filters equal None."""
    a = a if has_active_filters(a) else None
    b = b if has_active_filters(b) else None
    return normalize_filter(a) == normalize_filter(b)
