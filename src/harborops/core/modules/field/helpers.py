"""Building blocks for per-resource field metadata."""

from collections.abc import Iterable

from harborops.core.modules.field.models import FieldOption, FieldUIConfig, FilterFieldMetadata, InputType, RelationType
from harborops.core.modules.filter.models import FieldType, FilterOperator
from harborops.utils import split_camel

_BASE_OPERATORS = [FilterOperator.EQ, FilterOperator.NE]
_NULL_OPERATORS = [FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL]
_COMPARISON_OPERATORS = [
    FilterOperator.GT,
    FilterOperator.GTE,
    FilterOperator.LT,
    FilterOperator.LTE,
    FilterOperator.BETWEEN,
]
_SET_OPERATORS = [FilterOperator.IN, FilterOperator.NOT_IN]
_STRING_OPERATORS = [
    FilterOperator.CONTAINS,
    FilterOperator.STARTS_WITH,
    FilterOperator.ENDS_WITH,
    *_SET_OPERATORS,
]

# Per-field operator subsets shared by the resource definitions
TEXT_OPERATORS = [
    FilterOperator.CONTAINS,
    FilterOperator.STARTS_WITH,
    FilterOperator.ENDS_WITH,
    FilterOperator.EQ,
    FilterOperator.NE,
]
NULL_TEXT_OPERATORS = [*TEXT_OPERATORS, *_NULL_OPERATORS]
ENUM_OPERATORS = [FilterOperator.EQ, FilterOperator.NE, *_SET_OPERATORS]
REFERENCE_OPERATORS = [*ENUM_OPERATORS, *_NULL_OPERATORS]
MANY_TEXT_OPERATORS = [*TEXT_OPERATORS, *_SET_OPERATORS]

# Key fragments that mark a STRING column as free text
_SEARCHABLE_KEY_PARTS = ("note", "name", "description", "title", "content", "text", "email")


def get_operators_for_type(field_type: FieldType, include_comparison: bool = False) -> list[FilterOperator]:
    """Get the canonical operator list for a field type.

    Args:
        field_type: The field type
        include_comparison: Add gt/gte/lt/lte/between for orderable types

    Returns:
        Operators in display order, equality first and null tests last
    """
    operators = list(_BASE_OPERATORS)
    match field_type:
        case FieldType.INT | FieldType.FLOAT:
            if include_comparison:
                operators.extend(_COMPARISON_OPERATORS)
            operators.extend(_SET_OPERATORS)
        case FieldType.STRING:
            operators.extend(_STRING_OPERATORS)
        case FieldType.DATE | FieldType.DATETIME:
            if include_comparison:
                operators.extend(_COMPARISON_OPERATORS)
        case FieldType.ARRAY:
            operators.extend([*_SET_OPERATORS, FilterOperator.CONTAINS])
    operators.extend(_NULL_OPERATORS)
    return operators


def get_supported_operators() -> dict[FieldType, list[FilterOperator]]:
    """Widest legal operator list for every field type."""
    return {field_type: get_operators_for_type(field_type, include_comparison=True) for field_type in FieldType}


def format_field_label(key: str) -> str:
    """Turn a field key into a label, e.g. assignedToUser.email -> Assigned To User Email."""
    words: list[str] = []
    for segment in key.split("."):
        for word in split_camel(segment):
            if word.lower() == "id":
                words.append("ID")
            else:
                words.append(word[0].upper() + word[1:])
    return " ".join(words)


def get_default_ui_config(
    field_type: FieldType, key: str, is_enum: bool = False, enum_values: Iterable[str] | None = None
) -> FieldUIConfig:
    """Map a field type to its default input widget."""
    if is_enum and enum_values is not None:
        options = [FieldOption(value=value, label=value.replace("_", " ").title()) for value in enum_values]
        return FieldUIConfig(input_type=InputType.SELECT, options=options)

    match field_type:
        case FieldType.INT | FieldType.FLOAT:
            return FieldUIConfig(input_type=InputType.NUMBER)
        case FieldType.DATE:
            return FieldUIConfig(input_type=InputType.DATE, supports_range=True)
        case FieldType.DATETIME:
            return FieldUIConfig(input_type=InputType.DATETIME, supports_range=True)
        case FieldType.BOOLEAN:
            return FieldUIConfig(input_type=InputType.CHECKBOX)
        case FieldType.ARRAY:
            return FieldUIConfig(input_type=InputType.MULTISELECT)
        case FieldType.STRING if "email" in key.lower():
            return FieldUIConfig(input_type=InputType.EMAIL, placeholder="Enter email...")
    return FieldUIConfig(input_type=InputType.TEXT, placeholder=f"Enter {format_field_label(key).lower()}...")


def is_field_searchable(field_type: FieldType, key: str, relation_type: RelationType | None = None) -> bool:
    if field_type != FieldType.STRING or relation_type == RelationType.MANY:
        return False
    column = key.rsplit(".", 1)[-1].lower()
    return any(part in column for part in _SEARCHABLE_KEY_PARTS)


def is_field_sortable(field_type: FieldType, relation_type: RelationType | None = None) -> bool:
    if relation_type == RelationType.MANY:
        return False
    return field_type not in (FieldType.ARRAY, FieldType.JSON)


def is_field_groupable(field_type: FieldType, relation_type: RelationType | None = None) -> bool:
    return is_field_sortable(field_type, relation_type)


def user_fields(relation: str, *, with_name: bool = True) -> list[FilterFieldMetadata]:
    """Email and name fields of a to-one user relation."""
    fields = [define_field(f"{relation}.email", FieldType.STRING, relation_model="User", operators=TEXT_OPERATORS)]
    if with_name:
        fields.append(define_field(f"{relation}.name", FieldType.STRING, relation_model="User", operators=TEXT_OPERATORS))
    return fields


def define_field(
    key: str,
    field_type: FieldType,
    *,
    label: str | None = None,
    operators: Iterable[FilterOperator] | None = None,
    include_comparison: bool = False,
    relation_type: RelationType | None = None,
    relation_model: str | None = None,
    enum_values: list[str] | None = None,
    searchable: bool | None = None,
    sortable: bool | None = None,
    groupable: bool | None = None,
) -> FilterFieldMetadata:
    """Build metadata for one field, applying type defaults and per-field overrides.

    A dotted key names a relation field: the prefix is the relation and the
    suffix the field on the related model.

    Raises:
        ValueError: If an operator override is not legal for the field type
    """
    legal = get_operators_for_type(field_type, include_comparison=True)
    if operators is None:
        selected = get_operators_for_type(field_type, include_comparison)
    else:
        selected = list(operators)
        illegal = [op for op in selected if op not in legal]
        if illegal:
            raise ValueError(f"Operators {illegal} are not valid for field '{key}' of type {field_type}")

    relation = relation_field = None
    if "." in key:
        relation, relation_field = key.split(".", 1)
        relation_type = relation_type or RelationType.ONE
    elif relation_type is not None:
        raise ValueError(f"Relation type given for non-relation field '{key}'")

    return FilterFieldMetadata(
        key=key,
        label=label or format_field_label(key),
        type=field_type,
        operators=selected,
        relation=relation,
        relation_type=relation_type,
        searchable=is_field_searchable(field_type, key, relation_type) if searchable is None else searchable,
        sortable=is_field_sortable(field_type, relation_type) if sortable is None else sortable,
        groupable=is_field_groupable(field_type, relation_type) if groupable is None else groupable,
        enum_values=enum_values,
        ui=get_default_ui_config(field_type, key, is_enum=enum_values is not None, enum_values=enum_values),
        relation_model=relation_model,
        relation_field=relation_field,
    )
