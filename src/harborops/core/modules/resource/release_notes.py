"""Filterable fields of release notes."""

from harborops.core.modules.field.helpers import ENUM_OPERATORS, REFERENCE_OPERATORS, TEXT_OPERATORS, define_field, user_fields
from harborops.core.modules.field.models import FilterFieldMetadata, RelationMetadata, RelationType
from harborops.core.modules.filter.models import FieldType

RELEASE_NOTE_STATUSES = ["pending", "deployment_started", "deployed"]


def get_fields() -> list[FilterFieldMetadata]:
    return [
        define_field("id", FieldType.STRING, operators=ENUM_OPERATORS),
        define_field("status", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=RELEASE_NOTE_STATUSES),
        define_field("note", FieldType.STRING, operators=TEXT_OPERATORS),
        define_field("publishDate", FieldType.DATETIME, include_comparison=True),
        define_field("createdAt", FieldType.DATETIME, include_comparison=True),
        define_field("updatedAt", FieldType.DATETIME, include_comparison=True),
        define_field("serviceId", FieldType.STRING, label="Service", operators=REFERENCE_OPERATORS),
        define_field("service.name", FieldType.STRING, relation_model="Service", operators=TEXT_OPERATORS),
        define_field("service.port", FieldType.INT, relation_model="Service", include_comparison=True),
        define_field("createdBy", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("createdByUser"),
    ]


def get_relations() -> list[RelationMetadata]:
    return [
        RelationMetadata(name="service", type=RelationType.ONE, model="Service", display_field="name"),
        RelationMetadata(name="createdByUser", type=RelationType.ONE, model="User", display_field="name"),
    ]
