"""Tests for the HTTP surface, backed by a stub application."""

from typing import Any
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from harborops.core.modules.field.helpers import get_supported_operators
from harborops.core.modules.filter.models import FilterCondition, FilterOperator, parse_filter
from harborops.core.modules.filter.query_builder import build_mongo_query
from harborops.core.modules.filter.url_codec import encode_url_params
from harborops.core.modules.preset.models import FilterPreset
from harborops.core.modules.resource.registry import get_resource
from harborops.core.pagination import PaginatedList, Pagination
from harborops.errors import NotFoundError, UserError
from harborops.web.error_handlers import general_exception_handler, user_error_handler
from harborops.web.routers import metadata_router, presets_router, resources_router
from harborops.web.routers.presets import CreatePresetRequest

USER = {"X-User-Id": "u1"}


class StubApp:
    """Records calls and answers with canned data."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.presets: dict[Any, FilterPreset] = {}

    def get_field_operators(self):
        return get_supported_operators()

    def get_filter_metadata(self, resource):
        return get_resource(resource).get_metadata()

    async def list_items(self, resource, state, page=1, limit=None):
        self.calls.append(("list_items", (resource, state, page, limit)))
        rows = [{"id": "t1", "status": "pending"}]
        return PaginatedList[dict[str, Any]](data=rows, pagination=Pagination.create(page, limit or 50, 1))

    async def list_presets(self, user_id, page_id=None):
        self.calls.append(("list_presets", (user_id, page_id)))
        presets = list(self.presets.values())
        return PaginatedList[FilterPreset](data=presets, pagination=Pagination.create(1, max(len(presets), 1), len(presets)))

    async def create_preset(self, user_id, page_id, name, filters=None, order_by=None, group_by=None, is_shared=False):
        preset = FilterPreset(user_id=user_id, page_id=page_id, name=name, filters=filters, order_by=order_by, group_by=group_by, is_shared=is_shared)
        self.presets[preset.id] = preset
        return preset

    async def update_preset(self, user_id, preset_id, changes):
        self.calls.append(("update_preset", (user_id, preset_id, changes)))
        if preset_id not in self.presets:
            raise NotFoundError("Filter preset not found")
        return self.presets[preset_id].model_copy(update={"name": changes.name})

    async def delete_preset(self, user_id, preset_id):
        if self.presets.pop(preset_id, None) is None:
            raise NotFoundError("Filter preset not found")


@pytest.fixture
def stub_app():
    return StubApp()


@pytest.fixture
def client(stub_app):
    api = FastAPI()
    api.state.app = stub_app
    api.include_router(metadata_router, prefix="/api/v1")
    api.include_router(presets_router, prefix="/api/v1")
    api.include_router(resources_router, prefix="/api/v1")
    api.add_exception_handler(UserError, user_error_handler)
    api.add_exception_handler(Exception, general_exception_handler)
    return TestClient(api)


class TestMetadataRoutes:
    """Tests for metadata endpoints."""

    def test_field_operators(self, client):
        response = client.get("/api/v1/metadata/field-operators")
        assert response.status_code == 200
        assert "between" in response.json()["DATETIME"]

    def test_filter_metadata_uses_camel_case(self, client):
        response = client.get("/api/v1/servers/filter-metadata")
        assert response.status_code == 200
        body = response.json()
        assert body["defaultSort"] == {"key": "createdAt", "direction": "desc"}
        tags = next(field for field in body["fields"] if field["key"] == "tags.name")
        assert tags["relationType"] == "many"
        assert tags["sortable"] is False
        assert len(body["fields"]) == len(get_resource("servers").fields)

    def test_unknown_resource(self, client):
        response = client.get("/api/v1/boats/filter-metadata")
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"


class TestListRoutes:
    """Tests for listing endpoints."""

    def test_url_state_parsed(self, client, stub_app):
        condition = FilterCondition(key="status", type="STRING", operator=FilterOperator.EQ, value="pending")
        response = client.get(f"/api/v1/tasks?{encode_url_params(condition, 'deploy')}&page=2&limit=10", headers=USER)
        assert response.status_code == 200
        assert response.json()["pagination"] == {"page": 2, "limit": 10, "total": 1, "totalPages": 1}

        resource, state, page, limit = stub_app.calls[-1][1]
        assert (resource, page, limit) == ("tasks", 2, 10)
        assert state.filters == condition
        assert state.search == "deploy"

    def test_malformed_filters_rejected(self, client):
        response = client.get("/api/v1/tasks", params={"filters": "{oops"}, headers=USER)
        assert response.status_code == 400
        assert response.json()["type"] == "invalid_value"

    def test_caller_identity_required(self, client):
        response = client.get("/api/v1/tasks")
        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"

    def test_query_body(self, client, stub_app):
        body = {
            "filters": {"condition": "or", "childs": [{"key": "assignedTo", "type": "STRING", "operator": "eq", "value": "u1"}]},
            "orderBy": [{"key": "dueDate", "direction": "desc"}],
        }
        response = client.post("/api/v1/tasks/query", json=body, headers=USER)
        assert response.status_code == 200
        state = stub_app.calls[-1][1][1]
        assert state.order_by[0].key == "dueDate"
        assert state.filters.childs[0].key == "assignedTo"


class TestPresetRoutes:
    """Tests for filter preset endpoints."""

    def test_crud(self, client, stub_app):
        created = client.post(
            "/api/v1/filter-presets",
            json={"pageId": "tasks", "name": "Mine", "filters": {"key": "assignedTo", "type": "STRING", "operator": "eq", "value": "u1"}},
            headers=USER,
        )
        assert created.status_code == 201
        preset = created.json()
        assert preset["pageId"] == "tasks"
        assert preset["isShared"] is False
        assert preset["filters"]["operator"] == "eq"

        listed = client.get("/api/v1/filter-presets", params={"pageId": "tasks"}, headers=USER)
        assert listed.status_code == 200
        assert [item["id"] for item in listed.json()["data"]] == [preset["id"]]
        assert stub_app.calls[-1] == ("list_presets", ("u1", "tasks"))

        updated = client.put(f"/api/v1/filter-presets/{preset['id']}", json={"name": "Renamed"}, headers=USER)
        assert updated.status_code == 200
        assert updated.json()["name"] == "Renamed"
        changes = stub_app.calls[-1][1][2]
        assert changes.model_fields_set == {"name"}

        deleted = client.delete(f"/api/v1/filter-presets/{preset['id']}", headers=USER)
        assert deleted.status_code == 204

    def test_update_missing(self, client):
        response = client.put(f"/api/v1/filter-presets/{uuid4()}", json={"name": "x"}, headers=USER)
        assert response.status_code == 404

    def test_presets_path_not_treated_as_resource(self, client, stub_app):
        response = client.get("/api/v1/filter-presets", headers=USER)
        assert response.status_code == 200
        assert stub_app.calls[-1][0] == "list_presets"


class TestDocumentedExamples:
    """Request examples shown in the API docs must be accepted as written."""

    def test_preset_example_translates(self, task_fields, now):
        example = CreatePresetRequest.model_config["json_schema_extra"]["examples"][0]
        request = CreatePresetRequest.model_validate(example)
        query = build_mongo_query(request.filters, task_fields, now=now)
        assert query == {"status": {"$in": ["pending", "in_progress"]}}

    def test_list_filters_example_translates(self, task_fields, now):
        filter = parse_filter(
            {"condition": "and", "childs": [{"key": "status", "type": "STRING", "operator": "eq", "value": "pending"}]}
        )
        assert build_mongo_query(filter, task_fields, now=now) == {"status": {"$eq": "pending"}}
