from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from harborops.config import Config
from harborops.core.core import Core
from harborops.core.modules.field.helpers import get_supported_operators
from harborops.core.modules.field.models import FilterMetadata
from harborops.core.modules.filter.models import FieldType, Filter, FilterOperator, GroupByItem, OrderByItem
from harborops.core.modules.filter.url_codec import UrlFilterState
from harborops.core.modules.preset.models import FilterPreset, FilterPresetUpdate
from harborops.core.pagination import PaginatedList, Pagination
from harborops.errors import ValidationError


class App:
    """Facade for all application operations, checks request bounds before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    def get_field_operators(self) -> dict[FieldType, list[FilterOperator]]:
        """Get valid operators for each field type."""
        return get_supported_operators()

    def get_filter_metadata(self, resource: str) -> FilterMetadata:
        """Get filter metadata for a resource."""
        return self._core.services.filter.get_metadata(resource)

    async def list_items(
        self, resource: str, state: UrlFilterState, page: int = 1, limit: int | None = None
    ) -> PaginatedList[dict[str, Any]]:
        """List resource documents matching the filter state."""
        page, limit = self._resolve_page(page, limit)
        return await self._core.services.resource.list_items(resource, state, page, limit)

    async def list_presets(self, user_id: str, page_id: str | None = None) -> PaginatedList[FilterPreset]:
        """List presets visible to the user, optionally for one page."""
        presets = await self._core.services.preset.list_presets(user_id, page_id)
        limit = max(len(presets), 1)
        return PaginatedList[FilterPreset](data=presets, pagination=Pagination.create(1, limit, len(presets)))

    async def create_preset(
        self,
        user_id: str,
        page_id: str,
        name: str,
        filters: Filter | None = None,
        order_by: list[OrderByItem] | None = None,
        group_by: list[GroupByItem] | None = None,
        is_shared: bool = False,
    ) -> FilterPreset:
        """Save the current filter state as a named preset."""
        return await self._core.services.preset.create_preset(user_id, page_id, name, filters, order_by, group_by, is_shared)

    async def update_preset(self, user_id: str, preset_id: UUID, changes: FilterPresetUpdate) -> FilterPreset:
        """Update a preset owned by the user."""
        return await self._core.services.preset.update_preset(user_id, preset_id, changes)

    async def delete_preset(self, user_id: str, preset_id: UUID) -> None:
        """Delete a preset owned by the user."""
        await self._core.services.preset.delete_preset(user_id, preset_id)

    def _resolve_page(self, page: int, limit: int | None) -> tuple[int, int]:
        config = self._core.config
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if limit is None:
            limit = config.default_page_limit
        if limit < 1 or limit > config.max_page_limit:
            raise ValidationError(f"Limit must be between 1 and {config.max_page_limit}")
        return page, limit
