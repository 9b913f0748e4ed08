"""Field metadata describing what a resource can be filtered, sorted and grouped by."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from harborops.core.db import CamelModel
from harborops.core.modules.filter.models import FieldType, FilterOperator, SortDirection


class RelationType(StrEnum):
    """Cardinality of a relation traversed by a dotted field key."""

    ONE = "one"
    MANY = "many"


class InputType(StrEnum):
    """Input widget the frontend renders for a field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    MULTISELECT = "multiselect"
    CHECKBOX = "checkbox"
    EMAIL = "email"


class FieldOption(CamelModel):
    value: Any = Field(..., description="Stored value")
    label: str = Field(..., description="Display label")


class FieldUIConfig(CamelModel):
    """Default UI hints for a field's value input."""

    input_type: InputType = Field(..., description="Widget to render")
    placeholder: str | None = Field(None, description="Placeholder text")
    options: list[FieldOption] | None = Field(None, description="Choices for select inputs")
    supports_range: bool | None = Field(None, description="Whether a from/to range picker is offered")


class FilterFieldMetadata(CamelModel):
    """Static descriptor of one filterable field of a resource."""

    key: str = Field(..., description="Field key, dotted for relation fields")
    label: str = Field(..., description="Human-readable label")
    type: FieldType = Field(..., description="Field type")
    operators: list[FilterOperator] = Field(..., description="Operators allowed on this field")
    relation: str | None = Field(None, description="Relation traversed by the key prefix")
    relation_type: RelationType | None = Field(None, description="Cardinality of the relation")
    searchable: bool = Field(False, description="Included in free-text search")
    sortable: bool = Field(False, description="Usable in orderBy")
    groupable: bool = Field(False, description="Usable in groupBy")
    enum_values: list[str] | None = Field(None, description="Closed set of allowed values")
    ui: FieldUIConfig = Field(..., description="UI hints")
    relation_model: str | None = Field(None, description="Model name of the related entity")
    relation_field: str | None = Field(None, description="Field on the related entity")

    @property
    def is_relation(self) -> bool:
        return self.relation is not None

    @property
    def column(self) -> str:
        """Field name on the entity that owns it (suffix after the relation)."""
        if self.relation is not None and self.relation_field is not None:
            return self.relation_field
        return self.key


class RelationMetadata(CamelModel):
    name: str = Field(..., description="Relation name, the prefix of dotted keys")
    type: RelationType = Field(..., description="Cardinality")
    model: str = Field(..., description="Related model name")
    display_field: str = Field(..., description="Field shown for the related entity")


class DefaultSort(CamelModel):
    key: str = Field(..., description="Field key")
    direction: SortDirection = Field(SortDirection.DESC, description="Sort direction")


class FilterMetadata(CamelModel):
    """Everything a client needs to build filters for one resource."""

    fields: list[FilterFieldMetadata] = Field(..., description="Filterable fields")
    relations: list[RelationMetadata] = Field(default_factory=list, description="Relations reachable from fields")
    default_sort: DefaultSort = Field(..., description="Sort applied when orderBy is empty")
    supported_operators: dict[FieldType, list[FilterOperator]] = Field(
        ..., description="Widest operator list per field type"
    )

    def get_field(self, key: str) -> FilterFieldMetadata | None:
        """Get field metadata by key."""
        for field in self.fields:
            if field.key == key:
                return field
        return None
