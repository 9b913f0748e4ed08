from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from harborops.core.modules.filter.models import Filter, GroupByItem, OrderByItem
from harborops.core.modules.preset.models import FilterPreset, FilterPresetUpdate
from harborops.core.pagination import PaginatedList
from harborops.web.deps import AppDep, CurrentUserDep
from harborops.web.openapi import ErrorResponse

router = APIRouter(tags=["filter-presets"])


class CreatePresetRequest(BaseModel):
    """Request to save the current filter state as a preset."""

    page_id: str = Field(..., alias="pageId", description="Page the preset belongs to, usually a resource name")
    name: str = Field(..., description="Preset name shown in the preset picker")
    filters: Filter | None = Field(None, description="Filter tree")
    order_by: list[OrderByItem] | None = Field(None, alias="orderBy", description="Sort keys in priority order")
    group_by: list[GroupByItem] | None = Field(None, alias="groupBy", description="Grouping levels, outermost first")
    is_shared: bool = Field(False, alias="isShared", description="Visible to every user of the page")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "pageId": "tasks",
                    "name": "Open tasks",
                    "filters": {
                        "condition": "and",
                        "childs": [{"key": "status", "type": "STRING", "operator": "in", "value": ["pending", "in_progress"]}],
                    },
                    "orderBy": [{"key": "createdAt", "direction": "desc"}],
                }
            ]
        },
    }


@router.get(
    "/filter-presets",
    summary="List filter presets",
    description="Get the caller's presets and the presets shared with them, newest first.",
    operation_id="listFilterPresets",
    responses={
        200: {"description": "List of presets"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
    },
)
async def list_presets(
    app: AppDep,
    user_id: CurrentUserDep,
    page_id: Annotated[str | None, Query(alias="pageId", description="Only presets of this page")] = None,
) -> PaginatedList[FilterPreset]:
    return await app.list_presets(user_id, page_id)


@router.post(
    "/filter-presets",
    summary="Create filter preset",
    description="Save filters, ordering and grouping under a name.",
    operation_id="createFilterPreset",
    status_code=201,
    responses={
        201: {"description": "Preset created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid name or filter state"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
    },
)
async def create_preset(req: CreatePresetRequest, app: AppDep, user_id: CurrentUserDep) -> FilterPreset:
    return await app.create_preset(user_id, req.page_id, req.name, req.filters, req.order_by, req.group_by, req.is_shared)


@router.put(
    "/filter-presets/{preset_id}",
    summary="Update filter preset",
    description="Update the members sent in the body; members not sent keep their value.",
    operation_id="updateFilterPreset",
    responses={
        200: {"description": "Preset updated successfully"},
        400: {"model": ErrorResponse, "description": "Invalid name or filter state"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        404: {"model": ErrorResponse, "description": "Preset not found"},
    },
)
async def update_preset(preset_id: UUID, req: FilterPresetUpdate, app: AppDep, user_id: CurrentUserDep) -> FilterPreset:
    return await app.update_preset(user_id, preset_id, req)


@router.delete(
    "/filter-presets/{preset_id}",
    summary="Delete filter preset",
    description="Delete a preset owned by the caller.",
    operation_id="deleteFilterPreset",
    status_code=204,
    responses={
        204: {"description": "Preset deleted successfully"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        404: {"model": ErrorResponse, "description": "Preset not found"},
    },
)
async def delete_preset(preset_id: UUID, app: AppDep, user_id: CurrentUserDep) -> None:
    await app.delete_preset(user_id, preset_id)
