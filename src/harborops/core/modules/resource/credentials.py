"""Filterable fields of credentials."""

from harborops.core.modules.field.helpers import (
    ENUM_OPERATORS,
    MANY_TEXT_OPERATORS,
    NULL_TEXT_OPERATORS,
    REFERENCE_OPERATORS,
    TEXT_OPERATORS,
    define_field,
    user_fields,
)
from harborops.core.modules.field.models import FilterFieldMetadata, RelationMetadata, RelationType
from harborops.core.modules.filter.models import FieldType

_MANY_RELATIONS = [("servers", "Server"), ("services", "Service"), ("tags", "Tag"), ("groups", "Group")]


def get_fields() -> list[FilterFieldMetadata]:
    fields = [
        define_field("id", FieldType.STRING, operators=ENUM_OPERATORS),
        define_field("name", FieldType.STRING, operators=TEXT_OPERATORS),
        define_field("username", FieldType.STRING, operators=NULL_TEXT_OPERATORS),
        define_field("createdAt", FieldType.DATETIME, include_comparison=True),
        define_field("updatedAt", FieldType.DATETIME, include_comparison=True),
        define_field("createdBy", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("createdByUser"),
        *user_fields("updatedByUser"),
    ]
    for relation, model in _MANY_RELATIONS:
        fields.append(
            define_field(f"{relation}.id", FieldType.STRING, relation_type=RelationType.MANY, relation_model=model, operators=ENUM_OPERATORS)
        )
        fields.append(
            define_field(
                f"{relation}.name", FieldType.STRING, relation_type=RelationType.MANY, relation_model=model, operators=MANY_TEXT_OPERATORS
            )
        )
    return fields


def get_relations() -> list[RelationMetadata]:
    return [
        RelationMetadata(name="createdByUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="updatedByUser", type=RelationType.ONE, model="User", display_field="name"),
        *(
            RelationMetadata(name=relation, type=RelationType.MANY, model=model, display_field="name")
            for relation, model in _MANY_RELATIONS
        ),
    ]
