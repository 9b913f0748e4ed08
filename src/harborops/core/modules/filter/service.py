from collections.abc import Sequence
from datetime import datetime

import structlog

from harborops.core.core import Service
from harborops.core.modules.field.models import FilterMetadata
from harborops.core.modules.filter.models import Filter, GroupByItem, OrderByItem
from harborops.core.modules.filter.query_builder import QuerySpec, translate
from harborops.core.modules.filter.url_codec import UrlFilterState
from harborops.core.modules.resource.registry import find_resource, get_resource

logger = structlog.get_logger(__name__)


class FilterService(Service):
    """Service for filter metadata, validation and translation per resource."""

    def get_metadata(self, resource_name: str) -> FilterMetadata:
        """Get filter metadata of a resource.

        Raises:
            NotFoundError: If the resource is unknown
        """
        return get_resource(resource_name).get_metadata()

    def translate(self, resource_name: str, state: UrlFilterState, now: datetime | None = None) -> QuerySpec:
        """Translate filter state into a MongoDB query for a resource.

        Args:
            resource_name: The resource being listed
            state: Filters, search, ordering and grouping of the request
            now: Reference moment for relative dates

        Returns:
            Query document, sort specification and validated grouping

        Raises:
            NotFoundError: If the resource is unknown
            ValidationError: If any key, operator or value is invalid
        """
        resource = get_resource(resource_name)
        spec = translate(
            resource.field_index,
            state.filters,
            state.search,
            state.order_by or [],
            state.group_by or [],
            search_columns=resource.search_columns,
            default_sort=resource.default_sort_spec,
            base_query=resource.base_query,
            now=now,
        )
        logger.debug("filter_translated", resource=resource_name, query=spec.query, sort=spec.sort)
        return spec

    def validate_state(
        self,
        page_id: str,
        filters: Filter | None,
        order_by: Sequence[OrderByItem] | None = None,
        group_by: Sequence[GroupByItem] | None = None,
    ) -> None:
        """Check saved filter state against the page's resource, if the page is a resource.

        Raises:
            ValidationError: If any key, operator or value is invalid
        """
        resource = find_resource(page_id)
        if resource is None:
            logger.debug("filter_validation_skipped", page_id=page_id)
            return
        self.translate(page_id, UrlFilterState(filters=filters, order_by=order_by, group_by=group_by))
