"""Filterable fields of services."""

from harborops.core.modules.field.helpers import (
    ENUM_OPERATORS,
    MANY_TEXT_OPERATORS,
    REFERENCE_OPERATORS,
    TEXT_OPERATORS,
    define_field,
    user_fields,
)
from harborops.core.modules.field.models import FilterFieldMetadata, RelationMetadata, RelationType
from harborops.core.modules.filter.models import FieldType


def _many(key: str, field_type: FieldType, model: str) -> FilterFieldMetadata:
    operators = MANY_TEXT_OPERATORS if field_type == FieldType.STRING and not key.lower().endswith("id") else ENUM_OPERATORS
    return define_field(key, field_type, relation_type=RelationType.MANY, relation_model=model, operators=operators)


def get_fields() -> list[FilterFieldMetadata]:
    return [
        define_field("id", FieldType.STRING, operators=ENUM_OPERATORS),
        define_field("name", FieldType.STRING, operators=TEXT_OPERATORS),
        define_field("port", FieldType.INT, include_comparison=True),
        define_field("external", FieldType.BOOLEAN),
        define_field("createdAt", FieldType.DATETIME, include_comparison=True),
        define_field("updatedAt", FieldType.DATETIME, include_comparison=True),
        define_field("createdBy", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("createdByUser"),
        _many("servers.id", FieldType.STRING, "Server"),
        _many("servers.name", FieldType.STRING, "Server"),
        _many("tags.id", FieldType.STRING, "Tag"),
        _many("tags.name", FieldType.STRING, "Tag"),
        _many("dependencies.dependencyServiceId", FieldType.STRING, "ServiceDependency"),
        _many("groups.id", FieldType.STRING, "Group"),
        _many("groups.name", FieldType.STRING, "Group"),
    ]


def get_relations() -> list[RelationMetadata]:
    return [
        RelationMetadata(name="createdByUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="servers", type=RelationType.MANY, model="Server", display_field="name"),
        RelationMetadata(name="tags", type=RelationType.MANY, model="Tag", display_field="name"),
        RelationMetadata(
            name="dependencies", type=RelationType.MANY, model="ServiceDependency", display_field="dependencyServiceId"
        ),
        RelationMetadata(name="groups", type=RelationType.MANY, model="Group", display_field="name"),
    ]
