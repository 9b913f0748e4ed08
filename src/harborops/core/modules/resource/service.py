from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from harborops.core.core import Service
from harborops.core.db import document_to_row
from harborops.core.modules.filter.grouping import group_rows, paginate_groups
from harborops.core.modules.filter.url_codec import UrlFilterState
from harborops.core.modules.resource.registry import get_resource
from harborops.core.pagination import PaginatedList, Pagination

logger = structlog.get_logger(__name__)


class ResourceService(Service):
    """Lists resource documents through the advanced filter."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)

    async def list_items(self, resource_name: str, state: UrlFilterState, page: int = 1, limit: int = 50) -> PaginatedList[dict[str, Any]]:
        """Get a page of filtered, sorted and optionally grouped documents.

        Args:
            resource_name: The resource to list
            state: Filters, search, ordering and grouping of the request
            page: Page number, starting at 1
            limit: Maximum documents per page (per leaf group when grouped)

        Returns:
            Page of rows with pagination info, plus nested groups when requested

        Raises:
            NotFoundError: If the resource is unknown
            ValidationError: If the filter state is invalid
        """
        resource = get_resource(resource_name)
        spec = self.core.services.filter.translate(resource_name, state)
        collection = self.database.get_collection(resource.collection)

        total = await collection.count_documents(spec.query)
        offset = (page - 1) * limit

        if spec.group_by:
            max_rows = self.core.config.max_grouped_rows
            if total > max_rows:
                logger.warning("grouped_rows_truncated", resource=resource_name, total=total, max_rows=max_rows)
            docs = await collection.find(spec.query).sort(spec.sort).limit(max_rows).to_list()
            rows = [document_to_row(doc) for doc in docs]
            groups = paginate_groups(group_rows(rows, spec.group_by), page, limit)
            data = rows[offset : offset + limit]
        else:
            docs = await collection.find(spec.query).sort(spec.sort).skip(offset).limit(limit).to_list()
            data = [document_to_row(doc) for doc in docs]
            groups = None

        logger.debug(
            "list_items",
            resource=resource_name,
            page=page,
            limit=limit,
            total=total,
            returned=len(data),
            grouped=groups is not None,
        )
        return PaginatedList[dict[str, Any]](
            data=data,
            pagination=Pagination.create(page, limit, total),
            groups=groups,
        )
