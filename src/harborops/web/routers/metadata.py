from fastapi import APIRouter

from harborops.core.modules.filter.models import FieldType, FilterOperator
from harborops.web.deps import AppDep

router = APIRouter(tags=["metadata"])


@router.get(
    "/metadata/field-operators",
    summary="Get field type operators",
    description="Get valid filter operators for each field type.",
    operation_id="getFieldOperators",
    responses={200: {"description": "Mapping of field types to valid operators"}},
)
async def get_field_operators(app: AppDep) -> dict[FieldType, list[FilterOperator]]:
    return app.get_field_operators()
