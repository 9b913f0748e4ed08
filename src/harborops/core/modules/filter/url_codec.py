"""Encoding of filter state into bookmarkable URL query parameters."""

import json
from collections.abc import Callable, Mapping, Sequence
from typing import Any
from urllib.parse import parse_qs, urlencode

import structlog
from pydantic import Field

from harborops.core.db import CamelModel
from harborops.core.modules.filter.models import (
    Filter,
    GroupByItem,
    OrderByItem,
    dump_filter,
    has_active_filters,
    parse_filter,
    parse_group_by,
    parse_order_by,
)
from harborops.errors import InvalidValueError

logger = structlog.get_logger(__name__)

PARAM_FILTERS = "filters"
PARAM_SEARCH = "search"
PARAM_ORDER_BY = "orderBy"
PARAM_GROUP_BY = "groupBy"

UrlParams = Mapping[str, str | Sequence[str]] | str


class UrlFilterState(CamelModel):
    """Filter state carried by a page URL."""

    filters: Filter | None = Field(None, description="Filter tree")
    search: str | None = Field(None, description="Free-text search")
    order_by: list[OrderByItem] | None = Field(None, description="Sort keys in priority order")
    group_by: list[GroupByItem] | None = Field(None, description="Grouping levels, outermost first")


def _dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"))


def serialize_filters_to_url(
    filters: Filter | None = None,
    search: str | None = None,
    order_by: OrderByItem | Sequence[OrderByItem] | None = None,
    group_by: Sequence[GroupByItem] | None = None,
) -> dict[str, str]:
    """Map filter state to URL parameters, omitting absent or empty members.

    `orderBy` is always a JSON array, a single item is wrapped. Filter nodes are
    written with their `kind` tag, untagged input is still accepted on the way back.
    """
    params: dict[str, str] = {}
    if filters is not None and has_active_filters(filters):
        params[PARAM_FILTERS] = _dumps(dump_filter(filters))
    if search and search.strip():
        params[PARAM_SEARCH] = search
    if order_by:
        items = [order_by] if isinstance(order_by, OrderByItem) else list(order_by)
        params[PARAM_ORDER_BY] = _dumps([item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items])
    if group_by:
        params[PARAM_GROUP_BY] = _dumps([item.model_dump(mode="json", by_alias=True) for item in group_by])
    return params


def encode_url_params(
    filters: Filter | None = None,
    search: str | None = None,
    order_by: OrderByItem | Sequence[OrderByItem] | None = None,
    group_by: Sequence[GroupByItem] | None = None,
) -> str:
    """Filter state as a query string (without the leading '?')."""
    return urlencode(serialize_filters_to_url(filters, search, order_by, group_by))


def _flatten(params: UrlParams) -> dict[str, str]:
    """Accept a raw query string or a mapping; the last repeated value wins."""
    if isinstance(params, str):
        return {name: values[-1] for name, values in parse_qs(params.lstrip("?")).items()}
    flat: dict[str, str] = {}
    for name, value in params.items():
        if isinstance(value, str):
            flat[name] = value
        elif value:
            flat[name] = value[-1]
    return flat


def _decode[T](values: dict[str, str], name: str, parse: Callable[[Any], T], strict: bool) -> T | None:
    raw = values.get(name)
    if not raw:
        return None
    try:
        return parse(json.loads(raw))
    except (json.JSONDecodeError, RecursionError) as e:
        if strict:
            raise InvalidValueError(f"Malformed JSON in '{name}' parameter") from e
        logger.warning("url_param_parse_failed", param=name, error=str(e))
    except InvalidValueError as e:
        if strict:
            raise
        logger.warning("url_param_parse_failed", param=name, error=str(e))
    return None


def _read_state(params: UrlParams, strict: bool) -> UrlFilterState:
    values = _flatten(params)
    filters = _decode(values, PARAM_FILTERS, parse_filter, strict)
    return UrlFilterState(
        filters=filters if has_active_filters(filters) else None,
        search=values.get(PARAM_SEARCH) or None,
        order_by=_decode(values, PARAM_ORDER_BY, parse_order_by, strict) or None,
        group_by=_decode(values, PARAM_GROUP_BY, parse_group_by, strict) or None,
    )


def deserialize_filters_from_url(params: UrlParams) -> UrlFilterState:
    """Read filter state from URL parameters.

    A malformed parameter is logged and read as absent without affecting
    the others.
    """
    return _read_state(params, strict=False)


def parse_url_state(params: UrlParams) -> UrlFilterState:
    """Read filter state from URL parameters, rejecting malformed ones.

    Raises:
        InvalidValueError: If any parameter is not valid JSON of the expected shape
    """
    return _read_state(params, strict=True)
