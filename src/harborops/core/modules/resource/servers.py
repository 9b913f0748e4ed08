"""Filterable fields of servers."""

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

SERVER_TYPES = ["os", "rds", "amplify", "lambda", "ec2", "ecs", "other"]


def get_fields() -> list[FilterFieldMetadata]:
    return [
        define_field("id", FieldType.STRING, operators=ENUM_OPERATORS),
        define_field("name", FieldType.STRING, operators=TEXT_OPERATORS),
        define_field("type", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=SERVER_TYPES),
        define_field("publicIp", FieldType.STRING, label="Public IP", operators=NULL_TEXT_OPERATORS),
        define_field("privateIp", FieldType.STRING, label="Private IP", operators=NULL_TEXT_OPERATORS),
        define_field("username", FieldType.STRING, operators=NULL_TEXT_OPERATORS),
        define_field("port", FieldType.INT, include_comparison=True),
        define_field("sshPort", FieldType.INT, label="SSH Port", include_comparison=True),
        define_field("createdAt", FieldType.DATETIME, include_comparison=True),
        define_field("updatedAt", FieldType.DATETIME, include_comparison=True),
        define_field("createdBy", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("createdByUser"),
        define_field("services.id", FieldType.STRING, relation_type=RelationType.MANY, relation_model="Service", operators=ENUM_OPERATORS),
        define_field("services.name", FieldType.STRING, relation_type=RelationType.MANY, relation_model="Service", operators=MANY_TEXT_OPERATORS),
        define_field("services.port", FieldType.INT, relation_type=RelationType.MANY, relation_model="Service", include_comparison=True),
        define_field("tags.id", FieldType.STRING, relation_type=RelationType.MANY, relation_model="Tag", operators=ENUM_OPERATORS),
        define_field("tags.name", FieldType.STRING, relation_type=RelationType.MANY, relation_model="Tag", operators=MANY_TEXT_OPERATORS),
    ]


def get_relations() -> list[RelationMetadata]:
    return [
        RelationMetadata(name="createdByUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="services", type=RelationType.MANY, model="Service", display_field="name"),
        RelationMetadata(name="tags", type=RelationType.MANY, model="Tag", display_field="name"),
    ]
