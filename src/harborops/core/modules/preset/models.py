from datetime import datetime

from pydantic import Field

from harborops.core.db import CamelModel, MongoModel
from harborops.core.modules.filter.models import Filter, GroupByItem, OrderByItem
from harborops.utils import now


class FilterPreset(MongoModel):
    """Named filter state saved by a user for one page."""

    user_id: str = Field(..., description="Owner of the preset")
    page_id: str = Field(..., description="Page (resource) the preset belongs to")
    name: str = Field(..., description="Display name")
    filters: Filter | None = Field(None, description="Saved filter tree")
    order_by: list[OrderByItem] | None = Field(None, description="Saved sort keys")
    group_by: list[GroupByItem] | None = Field(None, description="Saved grouping levels")
    is_shared: bool = Field(False, description="Visible to every user of the page")
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class FilterPresetUpdate(CamelModel):
    """Partial update of a preset; only members that were sent are applied."""

    name: str | None = Field(None, description="New display name")
    filters: Filter | None = Field(None, description="New filter tree, null clears it")
    order_by: list[OrderByItem] | None = Field(None, description="New sort keys, null clears them")
    group_by: list[GroupByItem] | None = Field(None, description="New grouping levels, null clears them")
    is_shared: bool | None = Field(None, description="New sharing flag")
