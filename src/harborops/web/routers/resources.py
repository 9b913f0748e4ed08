from typing import Annotated, Any

from fastapi import APIRouter, Query, Request

from harborops.core.modules.field.models import FilterMetadata
from harborops.core.modules.filter.url_codec import UrlFilterState, parse_url_state
from harborops.core.pagination import PaginatedList
from harborops.web.deps import AppDep, CurrentUserDep
from harborops.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["resources"])


@router.get(
    "/{resource}/filter-metadata",
    summary="Get filter metadata",
    description="Get filterable fields, their operators and UI hints, relations and default sort of a resource.",
    operation_id="getFilterMetadata",
    responses={
        200: {"description": "Filter metadata"},
        404: {"model": ErrorResponse, "description": "Resource not found"},
    },
)
async def get_filter_metadata(resource: str, app: AppDep) -> FilterMetadata:
    return app.get_filter_metadata(resource)


@router.get(
    "/{resource}",
    summary="List resource items",
    description="""Get paginated items of a resource using the bookmarkable URL filter state.

**Query parameters:**
- `filters`: JSON filter tree, e.g. `{"condition":"and","childs":[{"key":"status","type":"STRING","operator":"eq","value":"pending"}]}`
- `search`: free text matched against the resource's searchable columns
- `orderBy`: JSON array of `{"key": ..., "direction": "asc"|"desc"}`
- `groupBy`: JSON array of `{"key": ..., "direction": "asc"|"desc"}`

Date values accept ISO dates and the relative tokens `now`, `today`, `yesterday`, `tomorrow`,
`thisWeek`, `lastWeek`, `thisMonth`, `lastMonth`, `thisYear`, `lastYear`.""",
    operation_id="listResourceItems",
    responses={
        200: {"description": "Paginated list of items, with groups when grouping is requested"},
        400: {"model": ErrorResponse, "description": "Invalid filter, field, operator or value"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        404: {"model": ErrorResponse, "description": "Resource not found"},
    },
)
async def list_items(
    resource: str,
    request: Request,
    app: AppDep,
    _: CurrentUserDep,
    page: Annotated[int, Query(description="Page number, starting at 1")] = 1,
    limit: Annotated[int | None, Query(description="Maximum items per page")] = None,
) -> PaginatedList[dict[str, Any]]:
    state = parse_url_state(str(request.query_params))
    return await app.list_items(resource, state, page, limit)


@router.post(
    "/{resource}/query",
    summary="Query resource items",
    description="Same as listing, with the filter state sent as a JSON body instead of URL parameters.",
    operation_id="queryResourceItems",
    responses={
        200: {"description": "Paginated list of items, with groups when grouping is requested"},
        400: {"model": ErrorResponse, "description": "Invalid filter, field, operator or value"},
        401: {"model": ErrorResponse, "description": "Missing caller identity"},
        404: {"model": ErrorResponse, "description": "Resource not found"},
    },
)
async def query_items(
    resource: str,
    state: UrlFilterState,
    app: AppDep,
    _: CurrentUserDep,
    page: Annotated[int, Query(description="Page number, starting at 1")] = 1,
    limit: Annotated[int | None, Query(description="Maximum items per page")] = None,
) -> PaginatedList[dict[str, Any]]:
    return await app.list_items(resource, state, page, limit)
