"""Filter value validation utilities."""

from datetime import datetime
from typing import Any

from harborops.core.modules.field.models import FilterFieldMetadata
from harborops.core.modules.filter.dates import normalize_date_bound
from harborops.core.modules.filter.models import (
    LIST_OPERATORS,
    NULL_OPERATORS,
    PATTERN_OPERATORS,
    FieldType,
    FilterOperator,
)
from harborops.errors import InvalidValueError

_DATE_TYPES = frozenset({FieldType.DATE, FieldType.DATETIME})


def validate_string_value(field: FilterFieldMetadata, value: Any) -> str:
    """Validate string field filter value."""
    if not isinstance(value, str):
        raise InvalidValueError(f"Filter value for string field '{field.key}' must be a string, got {type(value).__name__}")
    return value


def validate_boolean_value(field: FilterFieldMetadata, value: Any) -> bool:
    """Validate and normalize boolean field filter value."""
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    if not isinstance(value, bool):
        raise InvalidValueError(f"Filter value for boolean field '{field.key}' must be a boolean, got {type(value).__name__}")
    return value


def validate_int_value(field: FilterFieldMetadata, value: Any) -> int:
    """Validate and normalize integer field filter value."""
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as e:
            raise InvalidValueError(f"Filter value for integer field '{field.key}' must be an integer, got string: {value}") from e

    if isinstance(value, float) and value.is_integer():
        return int(value)

    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidValueError(f"Filter value for integer field '{field.key}' must be an integer, got {type(value).__name__}")

    return value


def validate_float_value(field: FilterFieldMetadata, value: Any) -> float:
    """Validate and normalize float field filter value."""
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise InvalidValueError(f"Filter value for float field '{field.key}' must be a number, got string: {value}") from e

    if not isinstance(value, int | float) or isinstance(value, bool):
        raise InvalidValueError(f"Filter value for float field '{field.key}' must be a number, got {type(value).__name__}")

    return float(value)


def validate_enum_value(field: FilterFieldMetadata, value: Any) -> str:
    """Validate that a value is one of the field's enum values."""
    allowed_values = field.enum_values or []
    text = str(value).lower() if isinstance(value, bool) else value
    if not isinstance(text, str) or text not in allowed_values:
        raise InvalidValueError(f"Invalid choice for field '{field.key}': '{value}'. Allowed values: {', '.join(allowed_values)}")
    return text


def validate_array_item(field: FilterFieldMetadata, value: Any) -> str | int | float:
    """Validate one element compared against an array field."""
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise InvalidValueError(f"Filter value for array field '{field.key}' must be a string or number")
    return value


def validate_scalar_value(field: FilterFieldMetadata, operator: FilterOperator, value: Any, now: datetime) -> Any:
    """Validate a single operand against the field type."""
    if value is None:
        raise InvalidValueError(f"Operator '{operator}' on field '{field.key}' requires a value")
    if field.enum_values is not None:
        return validate_enum_value(field, value)

    match field.type:
        case FieldType.STRING:
            return validate_string_value(field, value)
        case FieldType.INT:
            return validate_int_value(field, value)
        case FieldType.FLOAT:
            return validate_float_value(field, value)
        case FieldType.BOOLEAN:
            return validate_boolean_value(field, value)
        case FieldType.DATE | FieldType.DATETIME:
            return normalize_date_bound(value, operator, now)
        case FieldType.ARRAY:
            return validate_array_item(field, value)
    return value


def validate_between_value(field: FilterFieldMetadata, value: Any, now: datetime) -> list[Any]:
    """Validate an inclusive [from, to] range operand."""
    if not isinstance(value, list | tuple) or len(value) != 2:
        raise InvalidValueError(f"Operator 'between' on field '{field.key}' requires a [from, to] pair")
    start, end = value
    if start is None or end is None or start == "" or end == "":
        raise InvalidValueError(f"Operator 'between' on field '{field.key}' requires both bounds")

    if field.type in _DATE_TYPES:
        return [
            normalize_date_bound(start, FilterOperator.BETWEEN, now),
            normalize_date_bound(end, FilterOperator.BETWEEN, now, is_end=True),
        ]
    return [
        validate_scalar_value(field, FilterOperator.BETWEEN, start, now),
        validate_scalar_value(field, FilterOperator.BETWEEN, end, now),
    ]


def validate_filter_value(field: FilterFieldMetadata, operator: FilterOperator, value: Any, now: datetime) -> Any:
    """Validate and normalize a filter value for query building.

    Args:
        field: The field metadata
        operator: The filter operator, already checked to be legal for the field
        value: The value to validate and normalize
        now: Current moment, used to resolve relative dates

    Returns:
        Normalized value: None for null tests, a list for set and range
        operators, a concrete datetime for date fields

    Raises:
        InvalidValueError: If the value does not fit the field type or operator
    """
    if operator in NULL_OPERATORS:
        return None
    if value is None or value == "":
        raise InvalidValueError(f"Operator '{operator}' on field '{field.key}' requires a value")

    if operator == FilterOperator.BETWEEN:
        return validate_between_value(field, value, now)

    if operator in LIST_OPERATORS:
        items = value if isinstance(value, list | tuple) else [value]
        if not items:
            raise InvalidValueError(f"Filter value for operator '{operator}' on field '{field.key}' must be a non-empty list")
        return [validate_scalar_value(field, operator, item, now) for item in items]

    if isinstance(value, list | dict):
        raise InvalidValueError(f"Operator '{operator}' on field '{field.key}' requires a single value")

    if operator in PATTERN_OPERATORS:
        if isinstance(value, bool) or not isinstance(value, str | int | float):
            raise InvalidValueError(f"Operator '{operator}' on field '{field.key}' requires a text value")
        return str(value)

    return validate_scalar_value(field, operator, value, now)
