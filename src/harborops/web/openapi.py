from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Harbor-Ops Filter API",
            version="0.1.0",
            summary="Advanced filtering, filter presets and filtered listing for Harbor-Ops resources",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "UserIdHeader": {
                "type": "apiKey",
                "in": "header",
                "name": "X-User-Id",
                "description": "Caller identity forwarded by the authenticating gateway",
            },
        }
        openapi_schema["security"] = [{"UserIdHeader": []}]

        # Metadata endpoints do not depend on the caller
        for path, path_item in openapi_schema["paths"].items():
            if path.startswith("/api/v1/metadata") or path.endswith("/filter-metadata") or path == "/health":
                for operation in path_item.values():
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Unknown filter field 'foo'", "type": "invalid_field"},
                {"message": "Operator 'contains' is not valid for field 'port' of type 'INT'", "type": "invalid_operator"},
                {"message": "Filter preset not found", "type": "not_found"},
            ]
        }
    }
