"""Filterable fields of tasks."""

from harborops.core.modules.field.helpers import (
    ENUM_OPERATORS,
    NULL_TEXT_OPERATORS,
    REFERENCE_OPERATORS,
    TEXT_OPERATORS,
    define_field,
    user_fields,
)
from harborops.core.modules.field.models import FilterFieldMetadata, RelationMetadata, RelationType
from harborops.core.modules.filter.models import FieldType

TASK_STATUSES = [
    "pending",
    "in_progress",
    "in_review",
    "testing",
    "completed",
    "paused",
    "blocked",
    "cancelled",
    "reopened",
]
TASK_TYPES = ["bug", "feature", "todo", "epic", "improvement"]
TASK_PRIORITIES = ["low", "medium", "high", "critical"]


def get_fields() -> list[FilterFieldMetadata]:
    return [
        define_field("id", FieldType.STRING, operators=ENUM_OPERATORS),
        define_field("title", FieldType.STRING, operators=TEXT_OPERATORS),
        define_field("description", FieldType.STRING, operators=NULL_TEXT_OPERATORS),
        define_field("status", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=TASK_STATUSES),
        define_field("type", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=TASK_TYPES),
        define_field("priority", FieldType.STRING, operators=ENUM_OPERATORS, enum_values=TASK_PRIORITIES),
        define_field("sprintId", FieldType.STRING, label="Sprint", operators=REFERENCE_OPERATORS),
        define_field("sprint.name", FieldType.STRING, relation_model="Sprint", operators=TEXT_OPERATORS),
        define_field("serviceId", FieldType.STRING, label="Service", operators=REFERENCE_OPERATORS),
        define_field("service.name", FieldType.STRING, relation_model="Service", operators=TEXT_OPERATORS),
        define_field("assignedTo", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("assignedToUser"),
        define_field("attentionToId", FieldType.STRING, label="Attention To", operators=REFERENCE_OPERATORS),
        *user_fields("attentionToUser"),
        define_field("testerId", FieldType.STRING, label="Tester", operators=REFERENCE_OPERATORS),
        *user_fields("tester", with_name=False),
        define_field("createdBy", FieldType.STRING, operators=REFERENCE_OPERATORS),
        *user_fields("createdByUser"),
        define_field("parentTaskId", FieldType.STRING, label="Parent Task", operators=REFERENCE_OPERATORS),
        define_field("parentTask.title", FieldType.STRING, relation_model="Task", operators=TEXT_OPERATORS),
        define_field("reopenCount", FieldType.INT, include_comparison=True),
        define_field("estimatedHours", FieldType.FLOAT, include_comparison=True),
        define_field("actualHours", FieldType.FLOAT, include_comparison=True),
        define_field("dueDate", FieldType.DATETIME, include_comparison=True),
        define_field("assignedAt", FieldType.DATETIME, include_comparison=True),
        define_field("completedAt", FieldType.DATETIME, include_comparison=True),
        define_field("createdAt", FieldType.DATETIME, include_comparison=True),
        define_field("updatedAt", FieldType.DATETIME, include_comparison=True),
    ]


def get_relations() -> list[RelationMetadata]:
    return [
        RelationMetadata(name="sprint", type=RelationType.ONE, model="Sprint", display_field="name"),
        RelationMetadata(name="service", type=RelationType.ONE, model="Service", display_field="name"),
        RelationMetadata(name="assignedToUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="attentionToUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="tester", type=RelationType.ONE, model="User", display_field="email"),
        RelationMetadata(name="createdByUser", type=RelationType.ONE, model="User", display_field="name"),
        RelationMetadata(name="parentTask", type=RelationType.ONE, model="Task", display_field="title"),
    ]
