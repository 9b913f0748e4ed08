from collections.abc import Hashable
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from harborops.core.core import Service
from harborops.core.modules.filter.models import Filter, GroupByItem, OrderByItem, prune_empty_groups
from harborops.core.modules.preset.coalescer import RequestCoalescer
from harborops.core.modules.preset.models import FilterPreset, FilterPresetUpdate
from harborops.errors import NotFoundError, ValidationError
from harborops.utils import now

logger = structlog.get_logger(__name__)


class FilterPresetService(Service):
    """Manages saved filter presets, one list per user and page."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], coalescer: RequestCoalescer[list[FilterPreset]] | None = None) -> None:
        super().__init__(database)
        self._collection = database.get_collection("filter_presets")
        self._coalescer = coalescer or RequestCoalescer()

    async def on_start(self) -> None:
        """Create indexes for per-user and per-page listing."""
        await self._collection.create_index([("user_id", 1), ("page_id", 1), ("updated_at", -1)])
        await self._collection.create_index([("page_id", 1), ("is_shared", 1)])
        self._coalescer = RequestCoalescer(ttl=self.core.config.preset_cache_ttl)

    async def on_stop(self) -> None:
        self._coalescer.clear()

    async def list_presets(self, user_id: str, page_id: str | None = None) -> list[FilterPreset]:
        """Get the user's presets and the presets shared with them, newest first.

        Concurrent calls for the same user and page share one database query.
        """
        return await self._coalescer.run((user_id, page_id), lambda: self._load_presets(user_id, page_id))

    async def _load_presets(self, user_id: str, page_id: str | None) -> list[FilterPreset]:
        query: dict[str, Any] = {"$or": [{"user_id": user_id}, {"is_shared": True}]}
        if page_id is not None:
            query["page_id"] = page_id
        presets = await FilterPreset.list_cursor(self._collection.find(query).sort("updated_at", -1))
        logger.debug("list_presets", user_id=user_id, page_id=page_id, count=len(presets))
        return presets

    async def get_preset(self, user_id: str, preset_id: UUID) -> FilterPreset:
        """Get a preset owned by or shared with the user."""
        doc = await self._collection.find_one({"_id": preset_id})
        if doc is None:
            raise NotFoundError("Filter preset not found")
        preset = FilterPreset.model_validate(doc)
        if preset.user_id != user_id and not preset.is_shared:
            raise NotFoundError("Filter preset not found")
        return preset

    async def _get_owned_preset(self, user_id: str, preset_id: UUID) -> FilterPreset:
        doc = await self._collection.find_one({"_id": preset_id, "user_id": user_id})
        if doc is None:
            raise NotFoundError("Filter preset not found")
        return FilterPreset.model_validate(doc)

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
        """Save filter state under a name.

        Raises:
            ValidationError: If page id or name is blank, or the filter state is invalid for the page
        """
        page_id = page_id.strip()
        if not page_id:
            raise ValidationError("Page id is required")
        name = _clean_name(name)
        filters = prune_empty_groups(filters)
        self.core.services.filter.validate_state(page_id, filters, order_by, group_by)

        preset = FilterPreset(
            user_id=user_id,
            page_id=page_id,
            name=name,
            filters=filters,
            order_by=order_by or None,
            group_by=group_by or None,
            is_shared=is_shared,
        )
        await self._collection.insert_one(preset.to_mongo())
        self._invalidate(page_id)
        logger.info("preset_created", preset_id=preset.id, user_id=user_id, page_id=page_id)
        return preset

    async def update_preset(self, user_id: str, preset_id: UUID, changes: FilterPresetUpdate) -> FilterPreset:
        """Apply the members present in `changes` to a preset the user owns.

        Raises:
            NotFoundError: If the preset does not exist or belongs to another user
            ValidationError: If the new name is blank or the filter state is invalid
        """
        preset = await self._get_owned_preset(user_id, preset_id)
        sent = changes.model_fields_set

        updates: dict[str, Any] = {}
        if "name" in sent and changes.name is not None:
            updates["name"] = _clean_name(changes.name)
        if "filters" in sent:
            updates["filters"] = prune_empty_groups(changes.filters)
        if "order_by" in sent:
            updates["order_by"] = changes.order_by or None
        if "group_by" in sent:
            updates["group_by"] = changes.group_by or None
        if "is_shared" in sent and changes.is_shared is not None:
            updates["is_shared"] = changes.is_shared

        updated = preset.model_copy(update={**updates, "updated_at": now()})
        self.core.services.filter.validate_state(updated.page_id, updated.filters, updated.order_by, updated.group_by)

        await self._collection.replace_one({"_id": preset.id}, updated.to_mongo())
        self._invalidate(preset.page_id)
        logger.info("preset_updated", preset_id=preset.id, user_id=user_id, members=sorted(updates))
        return updated

    async def delete_preset(self, user_id: str, preset_id: UUID) -> None:
        """Delete a preset the user owns.

        Raises:
            NotFoundError: If the preset does not exist or belongs to another user
        """
        preset = await self._get_owned_preset(user_id, preset_id)
        await self._collection.delete_one({"_id": preset.id})
        self._invalidate(preset.page_id)
        logger.info("preset_deleted", preset_id=preset.id, user_id=user_id)

    def _invalidate(self, page_id: str) -> None:
        # Shared presets show up in other users' lists, so drop every list of the page
        def affected(key: Hashable) -> bool:
            return isinstance(key, tuple) and key[1] in (page_id, None)

        self._coalescer.invalidate_where(affected)


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Preset name is required")
    return name
