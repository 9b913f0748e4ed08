"""Tests for URL serialization of filter state."""

import json
from urllib.parse import parse_qs

import pytest

from harborops.core.modules.filter.comparison import are_filters_equal
from harborops.core.modules.filter.models import (
    FilterGroup,
    GroupByItem,
    OrderByItem,
    SortDirection,
    dump_filter,
    parse_filter,
)
from harborops.core.modules.filter.url_codec import (
    PARAM_FILTERS,
    PARAM_GROUP_BY,
    PARAM_ORDER_BY,
    PARAM_SEARCH,
    deserialize_filters_from_url,
    encode_url_params,
    parse_url_state,
    serialize_filters_to_url,
)
from harborops.errors import InvalidValueError

LEAF = {"key": "status", "type": "STRING", "operator": "eq", "value": "pending"}
NESTED = {
    "condition": "and",
    "childs": [
        {"key": "status", "type": "STRING", "operator": "ne", "value": "completed"},
        {
            "condition": "or",
            "childs": [
                {"key": "assignedTo", "type": "STRING", "operator": "eq", "value": "u1"},
                {"key": "testerId", "type": "STRING", "operator": "eq", "value": "u1"},
            ],
        },
    ],
}


class TestSerializeFiltersToUrl:
    """Tests for serialize_filters_to_url function."""

    def test_simple_leaf(self):
        params = serialize_filters_to_url(parse_filter(LEAF))
        decoded = json.loads(params[PARAM_FILTERS])
        assert {key: decoded[key] for key in LEAF} == LEAF
        assert set(params) == {PARAM_FILTERS}

    def test_absent_members_omitted(self):
        assert serialize_filters_to_url() == {}
        assert serialize_filters_to_url(FilterGroup(childs=[]), search="  ", order_by=[], group_by=[]) == {}

    def test_single_order_item_wrapped(self):
        params = serialize_filters_to_url(order_by=OrderByItem(key="createdAt", direction=SortDirection.DESC))
        assert json.loads(params[PARAM_ORDER_BY]) == [{"key": "createdAt", "direction": "desc"}]

    def test_group_by_and_search(self):
        params = serialize_filters_to_url(search="disk full", group_by=[GroupByItem(key="status")])
        assert params[PARAM_SEARCH] == "disk full"
        assert json.loads(params[PARAM_GROUP_BY]) == [{"key": "status", "direction": "asc"}]

    def test_compact_json(self):
        assert " " not in serialize_filters_to_url(parse_filter(NESTED))[PARAM_FILTERS]

    def test_empty_set_filter_kept(self):
        """Test an empty in-list is still written, rejection happens at translation."""
        params = serialize_filters_to_url(parse_filter({"key": "status", "type": "STRING", "operator": "in", "value": []}))
        assert json.loads(params[PARAM_FILTERS])["value"] == []


class TestRoundTrip:
    """Serializing then deserializing recovers the state."""

    @pytest.mark.parametrize("data", [LEAF, NESTED])
    def test_filters_round_trip(self, data):
        original = parse_filter(data)
        state = deserialize_filters_from_url(serialize_filters_to_url(original))
        assert state.filters == original
        assert dump_filter(state.filters) == dump_filter(original)

    def test_output_tagged_and_untagged_input_accepted(self):
        """Test written nodes carry `kind` while plain untagged trees still decode."""
        written = json.loads(serialize_filters_to_url(parse_filter(NESTED))[PARAM_FILTERS])
        assert written["kind"] == "group"
        assert {child["kind"] for child in written["childs"]} == {"condition", "group"}
        state = deserialize_filters_from_url({PARAM_FILTERS: json.dumps(NESTED)})
        assert state.filters == parse_filter(NESTED)

    def test_child_order_preserved(self):
        original = parse_filter(NESTED)
        state = deserialize_filters_from_url(encode_url_params(original))
        assert [getattr(child, "key", None) for child in state.filters.childs] == ["status", None]

    def test_full_state_through_query_string(self):
        order_by = [OrderByItem(key="priority"), OrderByItem(key="createdAt", direction=SortDirection.DESC)]
        group_by = [GroupByItem(key="status", direction=SortDirection.DESC)]
        query = encode_url_params(parse_filter(NESTED), "db & cache", order_by, group_by)

        state = deserialize_filters_from_url(query)
        assert are_filters_equal(state.filters, parse_filter(NESTED))
        assert state.search == "db & cache"
        assert state.order_by == order_by
        assert state.group_by == group_by

    def test_query_string_is_url_encoded(self):
        query = encode_url_params(parse_filter(LEAF), "a&b")
        assert parse_qs(query)[PARAM_SEARCH] == ["a&b"]


class TestDeserializeFiltersFromUrl:
    """Tests for lenient URL parsing."""

    def test_malformed_parameter_does_not_block_others(self):
        params = {
            PARAM_FILTERS: "{not json",
            PARAM_SEARCH: "router",
            PARAM_ORDER_BY: '[{"key":"name","direction":"desc"}]',
            PARAM_GROUP_BY: '[{"key":"type"}]',
        }
        state = deserialize_filters_from_url(params)
        assert state.filters is None
        assert state.search == "router"
        assert state.order_by == [OrderByItem(key="name", direction=SortDirection.DESC)]
        assert state.group_by == [GroupByItem(key="type")]

    def test_wrong_shape_degrades_to_absent(self):
        state = deserialize_filters_from_url({PARAM_ORDER_BY: '[{"direction":"desc"}]', PARAM_SEARCH: "x"})
        assert state.order_by is None
        assert state.search == "x"

    def test_inactive_filter_dropped(self):
        state = deserialize_filters_from_url({PARAM_FILTERS: '{"condition":"and","childs":[]}'})
        assert state.filters is None

    def test_last_repeated_value_wins(self):
        assert deserialize_filters_from_url({PARAM_SEARCH: ["first", "second"]}).search == "second"
        assert deserialize_filters_from_url("?search=first&search=second").search == "second"

    def test_single_order_object_accepted(self):
        state = deserialize_filters_from_url({PARAM_ORDER_BY: '{"key":"name"}'})
        assert state.order_by == [OrderByItem(key="name")]

    def test_deeply_nested_filters_degrade_to_absent(self):
        """Test nesting past the JSON recursion limit only drops that parameter."""
        state = deserialize_filters_from_url({PARAM_FILTERS: "[" * 200_000, PARAM_SEARCH: "x"})
        assert state.filters is None
        assert state.search == "x"


class TestParseUrlState:
    """Tests for strict URL parsing used by list endpoints."""

    def test_malformed_json_raises(self):
        with pytest.raises(InvalidValueError, match="Malformed JSON in 'filters'"):
            parse_url_state({PARAM_FILTERS: "{"})

    def test_deeply_nested_json_raises(self):
        with pytest.raises(InvalidValueError, match="Malformed JSON in 'filters'"):
            parse_url_state({PARAM_FILTERS: "[" * 200_000})

    def test_wrong_shape_raises(self):
        with pytest.raises(InvalidValueError, match="Invalid groupBy"):
            parse_url_state({PARAM_GROUP_BY: '[{"key":"type","direction":"sideways"}]'})

    def test_valid_state(self):
        state = parse_url_state(encode_url_params(parse_filter(LEAF), "x"))
        assert state.filters == parse_filter(LEAF)
        assert state.search == "x"
