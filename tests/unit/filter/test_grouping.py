"""Tests for nested grouping of result rows."""

from harborops.core.modules.filter.grouping import NULL_GROUP_KEY, NULL_GROUP_LABEL, get_row_value, group_rows, paginate_groups
from harborops.core.modules.filter.models import GroupByItem, SortDirection

ROWS = [
    {"id": "t1", "status": "open", "priority": "high", "service": {"name": "api"}},
    {"id": "t2", "status": "closed", "priority": "low", "service": {"name": "web"}},
    {"id": "t3", "status": "open", "priority": "low", "service": None},
    {"id": "t4", "status": None, "priority": "high"},
    {"id": "t5", "status": "open", "priority": "high", "service": {"name": "api"}},
]


def ids(rows):
    return [row["id"] for row in rows]


class TestGetRowValue:
    """Tests for get_row_value function."""

    def test_dotted_key(self):
        assert get_row_value(ROWS[0], "service.name") == "api"

    def test_missing_segment_is_none(self):
        assert get_row_value(ROWS[2], "service.name") is None
        assert get_row_value(ROWS[3], "service.name") is None


class TestGroupRows:
    """Tests for group_rows function."""

    def test_no_levels(self):
        assert group_rows(ROWS, []) == []

    def test_single_level_sorted_with_null_last(self):
        groups = group_rows(ROWS, [GroupByItem(key="status")])
        assert [group.key for group in groups] == ["closed", "open", NULL_GROUP_KEY]
        assert [group.count for group in groups] == [1, 3, 1]
        assert ids(groups[1].items) == ["t1", "t3", "t5"]
        assert groups[2].label == NULL_GROUP_LABEL
        assert groups[0].subgroups is None

    def test_null_bucket_last_when_descending(self):
        groups = group_rows(ROWS, [GroupByItem(key="status", direction=SortDirection.DESC)])
        assert [group.key for group in groups] == ["open", "closed", NULL_GROUP_KEY]

    def test_nested_levels(self):
        groups = group_rows(ROWS, [GroupByItem(key="priority"), GroupByItem(key="service.name")])
        assert [group.key for group in groups] == ["high", "low"]
        high = groups[0]
        assert high.items is None
        assert [(sub.key, sub.count) for sub in high.subgroups] == [("api", 2), (NULL_GROUP_KEY, 1)]
        assert ids(high.subgroups[0].items) == ["t1", "t5"]
        assert high.subgroups[0].field == "service.name"

    def test_boolean_and_object_labels(self):
        rows = [
            {"id": "s1", "external": True, "owner": {"name": "Ann"}},
            {"id": "s2", "external": False, "owner": {"email": "bo@example.com"}},
        ]
        by_flag = group_rows(rows, [GroupByItem(key="external")])
        assert [(group.key, group.label) for group in by_flag] == [("false", "No"), ("true", "Yes")]
        by_owner = group_rows(rows, [GroupByItem(key="owner")])
        assert sorted(group.label for group in by_owner) == ["Ann", "bo@example.com"]

    def test_mixed_types_fall_back_to_string_order(self):
        rows = [{"id": "a", "v": 10}, {"id": "b", "v": "9"}]
        groups = group_rows(rows, [GroupByItem(key="v")])
        assert [group.key for group in groups] == ["10", "9"]


class TestPaginateGroups:
    """Tests for paginate_groups function."""

    def test_pages_leaf_items_and_keeps_counts(self):
        groups = group_rows(ROWS, [GroupByItem(key="status")])
        page_two = paginate_groups(groups, page=2, limit=2)
        open_group = page_two[1]
        assert ids(open_group.items) == ["t5"]
        assert open_group.count == 3
        assert page_two[0].items == []

    def test_nested_pagination(self):
        groups = group_rows(ROWS, [GroupByItem(key="priority"), GroupByItem(key="status")])
        paged = paginate_groups(groups, page=1, limit=1)
        assert all(len(sub.items) <= 1 for group in paged for sub in group.subgroups)
        assert groups[0].subgroups[0].items is not paged[0].subgroups[0].items
