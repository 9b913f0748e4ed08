"""Tests for field metadata building blocks."""

import pytest

from harborops.core.modules.field.helpers import (
    ENUM_OPERATORS,
    define_field,
    format_field_label,
    get_default_ui_config,
    get_operators_for_type,
    get_supported_operators,
    is_field_groupable,
    is_field_searchable,
    is_field_sortable,
)
from harborops.core.modules.field.models import InputType, RelationType
from harborops.core.modules.filter.models import COMPARISON_OPERATORS, FieldType, FilterOperator

O = FilterOperator


class TestGetOperatorsForType:
    """Tests for get_operators_for_type function."""

    def test_string(self):
        assert get_operators_for_type(FieldType.STRING) == [
            O.EQ, O.NE, O.CONTAINS, O.STARTS_WITH, O.ENDS_WITH, O.IN, O.NOT_IN, O.IS_NULL, O.IS_NOT_NULL,
        ]  # fmt: skip

    def test_comparison_toggle_for_orderable_types(self):
        for field_type in (FieldType.INT, FieldType.FLOAT, FieldType.DATE, FieldType.DATETIME):
            without = set(get_operators_for_type(field_type))
            with_comparison = set(get_operators_for_type(field_type, include_comparison=True))
            assert not without & COMPARISON_OPERATORS
            assert with_comparison - without == COMPARISON_OPERATORS

    def test_comparison_toggle_ignored_for_other_types(self):
        for field_type in (FieldType.STRING, FieldType.BOOLEAN, FieldType.ARRAY, FieldType.JSON):
            assert get_operators_for_type(field_type, True) == get_operators_for_type(field_type)

    def test_boolean_and_json_are_equality_only(self):
        assert get_operators_for_type(FieldType.BOOLEAN) == [O.EQ, O.NE, O.IS_NULL, O.IS_NOT_NULL]
        assert get_operators_for_type(FieldType.JSON) == [O.EQ, O.NE, O.IS_NULL, O.IS_NOT_NULL]

    def test_contains_only_for_text_types(self):
        for field_type in FieldType:
            allowed = O.CONTAINS in get_operators_for_type(field_type, True)
            assert allowed == (field_type in (FieldType.STRING, FieldType.ARRAY))

    def test_null_tests_last(self):
        for field_type in FieldType:
            assert get_operators_for_type(field_type, True)[-2:] == [O.IS_NULL, O.IS_NOT_NULL]

    def test_supported_operators_cover_every_type(self):
        supported = get_supported_operators()
        assert set(supported) == set(FieldType)
        assert O.BETWEEN in supported[FieldType.DATETIME]


class TestDefaultUIConfig:
    """Tests for get_default_ui_config function."""

    @pytest.mark.parametrize(
        ("field_type", "input_type"),
        [
            (FieldType.INT, InputType.NUMBER),
            (FieldType.FLOAT, InputType.NUMBER),
            (FieldType.DATE, InputType.DATE),
            (FieldType.DATETIME, InputType.DATETIME),
            (FieldType.BOOLEAN, InputType.CHECKBOX),
            (FieldType.ARRAY, InputType.MULTISELECT),
            (FieldType.STRING, InputType.TEXT),
        ],
    )
    def test_input_type(self, field_type, input_type):
        assert get_default_ui_config(field_type, "value").input_type == input_type

    def test_enum_options(self):
        ui = get_default_ui_config(FieldType.STRING, "status", is_enum=True, enum_values=["in_progress", "done"])
        assert ui.input_type == InputType.SELECT
        assert [(option.value, option.label) for option in ui.options] == [("in_progress", "In Progress"), ("done", "Done")]

    def test_email_and_placeholder(self):
        assert get_default_ui_config(FieldType.STRING, "createdByUser.email").input_type == InputType.EMAIL
        assert get_default_ui_config(FieldType.STRING, "publicIp").placeholder == "Enter public ip..."

    def test_date_ranges(self):
        assert get_default_ui_config(FieldType.DATE, "dueDate").supports_range is True


class TestPolicies:
    """Tests for searchable, sortable and groupable predicates."""

    def test_searchable_text_columns(self):
        assert is_field_searchable(FieldType.STRING, "title") is True
        assert is_field_searchable(FieldType.STRING, "service.name") is True
        assert is_field_searchable(FieldType.STRING, "status") is False
        assert is_field_searchable(FieldType.INT, "name") is False
        assert is_field_searchable(FieldType.STRING, "tags.name", RelationType.MANY) is False

    def test_many_relations_never_sortable_or_groupable(self):
        assert is_field_sortable(FieldType.STRING, RelationType.MANY) is False
        assert is_field_groupable(FieldType.INT, RelationType.MANY) is False

    def test_one_relations_and_scalars(self):
        assert is_field_sortable(FieldType.STRING, RelationType.ONE) is True
        assert is_field_groupable(FieldType.DATETIME) is True
        assert is_field_sortable(FieldType.JSON) is False


class TestFormatFieldLabel:
    """Tests for format_field_label function."""

    def test_labels(self):
        assert format_field_label("createdAt") == "Created At"
        assert format_field_label("assignedToUser.email") == "Assigned To User Email"
        assert format_field_label("sprintId") == "Sprint ID"


class TestDefineField:
    """Tests for define_field function."""

    def test_scalar_defaults(self):
        field = define_field("reopenCount", FieldType.INT, include_comparison=True)
        assert field.label == "Reopen Count"
        assert field.relation is None
        assert field.sortable is True
        assert O.BETWEEN in field.operators

    def test_enum_override(self):
        field = define_field("status", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=["open"])
        assert field.operators == [O.EQ, O.NE, O.IN, O.NOT_IN]
        assert field.ui.input_type == InputType.SELECT

    def test_dotted_key_is_to_one_relation(self):
        field = define_field("service.name", FieldType.STRING, relation_model="Service")
        assert field.relation == "service"
        assert field.relation_field == "name"
        assert field.relation_type == RelationType.ONE
        assert field.column == "name"
        assert field.sortable is True

    def test_many_relation(self):
        field = define_field("tags.name", FieldType.STRING, relation_type=RelationType.MANY)
        assert field.is_relation is True
        assert field.sortable is False
        assert field.groupable is False

    def test_illegal_operator_override(self):
        with pytest.raises(ValueError, match="not valid for field 'port'"):
            define_field("port", FieldType.INT, operators=[O.CONTAINS])

    def test_relation_type_requires_dotted_key(self):
        with pytest.raises(ValueError, match="non-relation field"):
            define_field("tags", FieldType.ARRAY, relation_type=RelationType.MANY)

    def test_serialized_with_camel_case(self):
        data = define_field("tags.name", FieldType.STRING, relation_type=RelationType.MANY).model_dump(by_alias=True)
        assert data["relationType"] == RelationType.MANY
        assert "enumValues" in data
