"""Registry of resources that support the advanced filter."""

from collections.abc import Callable
from functools import cached_property
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from harborops.core.modules.field.helpers import get_supported_operators
from harborops.core.modules.field.models import DefaultSort, FilterFieldMetadata, FilterMetadata, RelationMetadata
from harborops.core.modules.filter.models import SortDirection
from harborops.core.modules.filter.query_builder import FieldIndex, SortSpec, get_field_path, index_fields
from harborops.core.modules.resource import credentials, release_notes, servers, services, tasks
from harborops.errors import NotFoundError

# Soft-deleted documents carry a deletedAt timestamp
NOT_DELETED_QUERY: dict[str, Any] = {"deletedAt": None}


class ResourceDefinition(BaseModel):
    """Static description of one filterable resource."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Resource name used in URLs and as preset page id")
    collection: str = Field(..., description="MongoDB collection")
    fields: list[FilterFieldMetadata] = Field(..., description="Filterable fields")
    relations: list[RelationMetadata] = Field(default_factory=list)
    search_columns: list[str] = Field(default_factory=list, description="Columns matched by free-text search")
    default_sort: DefaultSort = Field(default_factory=lambda: DefaultSort(key="createdAt", direction=SortDirection.DESC))
    base_query: dict[str, Any] = Field(default_factory=lambda: dict(NOT_DELETED_QUERY))

    @cached_property
    def field_index(self) -> FieldIndex:
        return index_fields(self.fields)

    @property
    def default_sort_spec(self) -> SortSpec:
        direction = -1 if self.default_sort.direction == SortDirection.DESC else 1
        return [(get_field_path(self.default_sort.key), direction)]

    def get_metadata(self) -> FilterMetadata:
        return FilterMetadata(
            fields=self.fields,
            relations=self.relations,
            default_sort=self.default_sort,
            supported_operators=get_supported_operators(),
        )


def _define(
    name: str,
    collection: str,
    get_fields: Callable[[], list[FilterFieldMetadata]],
    get_relations: Callable[[], list[RelationMetadata]],
    search_columns: list[str],
) -> ResourceDefinition:
    fields = get_fields()
    keys = {field.key for field in fields}
    missing = [column for column in search_columns if column not in keys]
    if missing:
        raise ValueError(f"Search columns {missing} of resource '{name}' are not fields")
    return ResourceDefinition(
        name=name,
        collection=collection,
        fields=fields,
        relations=get_relations(),
        search_columns=search_columns,
    )


RESOURCES: dict[str, ResourceDefinition] = {
    resource.name: resource
    for resource in (
        _define("tasks", "tasks", tasks.get_fields, tasks.get_relations, ["title", "description"]),
        _define("servers", "servers", servers.get_fields, servers.get_relations, ["name", "publicIp", "privateIp", "username"]),
        _define("services", "services", services.get_fields, services.get_relations, ["name"]),
        _define("credentials", "credentials", credentials.get_fields, credentials.get_relations, ["name", "username"]),
        _define("release-notes", "release_notes", release_notes.get_fields, release_notes.get_relations, ["note"]),
    )
}


def find_resource(name: str) -> ResourceDefinition | None:
    return RESOURCES.get(name)


def get_resource(name: str) -> ResourceDefinition:
    """Get a resource definition by name.

    Raises:
        NotFoundError: If no resource has the name
    """
    resource = RESOURCES.get(name)
    if resource is None:
        raise NotFoundError(f"Resource '{name}' not found")
    return resource
