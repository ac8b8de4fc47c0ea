"""HTTP tests: dispatch through the FastAPI app built by create_app."""
import asyncio

import pytest
import yaml
from fastapi.testclient import TestClient
from starlette.responses import Response

from openapi_router.app import create_app
from openapi_router.config import Settings
from openapi_router.errors import RegistryStateError, SchemaDefinitionError
from openapi_router.routing import DispatchAdapter, OpenAPIRouter, RouteSchema

from tests.apps import build_router


class TestValidatedDispatch:
    def test_default_applied(self, client):
        response = client.get("/todos")
        assert response.status_code == 200
        assert response.json() == {"page": 1, "todos": []}

    def test_query_value_coerced(self, client):
        assert client.get("/todos", params={"page": "3"}).json()["page"] == 3

    def test_invalid_query_value(self, client):
        response = client.get("/todos", params={"page": "abc"})
        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"name": "page", "location": "query", "message": "is not a valid integer"}],
        }

    def test_path_parameter(self, client):
        response = client.get("/todos/7")
        assert response.status_code == 200
        assert response.json() == {"todoId": 7}

    def test_invalid_path_parameter(self, client):
        response = client.get("/todos/seven")
        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"name": "todoId", "location": "path", "message": "is not a valid integer"},
        ]

    def test_all_errors_reported(self, client):
        response = client.get("/search", params={"status": "archived", "since": "yesterday"})
        assert response.status_code == 400
        assert [(e["name"], e["message"]) for e in response.json()["errors"]] == [
            ("q", "is required"),
            ("status", "is not a valid enumeration value"),
            ("since", "is not a valid date"),
        ]

    def test_plain_handler_with_enums_and_arrays(self, client):
        response = client.get("/search", params=[
            ("q", "milk"), ("status", "OPEN"), ("priority", "HIGH"),
            ("tags", "home"), ("tags", "errands"), ("since", "2024-01-15"),
        ])
        assert response.status_code == 200
        assert response.json() == {
            "q": "milk", "status": "open", "priority": "HIGH",
            "tags": ["home", "errands"], "since": "2024-01-15",
        }

    def test_repeated_scalar_takes_last_value(self, client):
        assert client.get("/todos?page=2&page=5").json()["page"] == 5

    def test_model_return_value_serialized(self, client):
        response = client.post("/todos/4/complete")
        assert response.status_code == 200
        assert response.json() == {"id": 4, "title": "Buy milk", "done": True, "owner": None}

    def test_handler_validation_error(self, client):
        response = client.post("/todos/0/complete")
        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"name": "todoId", "location": "path", "message": "is already complete"}],
        }

    def test_context_passed_to_handlers(self, client):
        assert client.get("/owner").json() == {"owner": "tests"}

    def test_method_not_allowed(self, client):
        assert client.delete("/todos").status_code == 405

    def test_correlation_id_echoed(self, client):
        response = client.get("/todos", headers={"X-Correlation-ID": "abc123"})
        assert response.headers["X-Correlation-ID"] == "abc123"


class TestRawDispatch:
    def test_raw_route(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_response_passthrough(self, client):
        response = client.get("/plain")
        assert response.status_code == 200
        assert response.text == "pong"
        assert response.headers["content-type"].startswith("text/plain")

    def test_unhandled_error_becomes_500(self, lenient_client):
        response = lenient_client.get("/boom")
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "E9001_UNEXPECTED_ERROR"

    def test_unhandled_error_propagates(self, client):
        with pytest.raises(RuntimeError, match="kaboom"):
            client.get("/boom")


class TestDocumentEndpoints:
    def test_openapi_json(self, client, router):
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert response.json() == router.openapi()

    def test_openapi_yaml(self, client, router):
        response = client.get("/openapi.yaml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/yaml")
        assert yaml.safe_load(response.text) == router.openapi()

    def test_swagger_ui(self, client):
        response = client.get("/docs")
        assert response.status_code == 200
        assert "swagger-ui" in response.text
        assert "/openapi.json" in response.text

    def test_redoc(self, client):
        response = client.get("/redocs")
        assert response.status_code == 200
        assert "redoc" in response.text.lower()

    def test_fastapi_schema_disabled(self, app):
        assert app.openapi_url is None
        assert app.docs_url is None

    def test_endpoints_can_be_disabled(self):
        settings = Settings(LOG_LEVEL="WARNING", DOCS_URL="", REDOC_URL="", OPENAPI_YAML_URL="")
        with TestClient(create_app(build_router(settings=settings), settings=settings)) as client:
            assert client.get("/docs").status_code == 404
            assert client.get("/redocs").status_code == 404
            assert client.get("/openapi.yaml").status_code == 404
            assert client.get("/openapi.json").status_code == 200


class TestMounting:
    def test_head_handler_not_shadowed_by_get(self, settings):
        router = OpenAPIRouter(settings=settings)
        router.raw.get("/status")(lambda request: {"status": "ok"})
        router.raw.head("/status")(lambda request: Response(headers={"X-Handler": "head"}))
        with TestClient(create_app(router, settings=settings)) as client:
            assert client.head("/status").headers["X-Handler"] == "head"
            assert client.get("/status").json() == {"status": "ok"}

    def test_get_still_answers_head_without_head_route(self, settings):
        router = OpenAPIRouter(settings=settings)
        router.raw.get("/status")(lambda request: {"status": "ok"})
        with TestClient(create_app(router, settings=settings)) as client:
            assert client.head("/status").status_code == 200

    @pytest.mark.parametrize("method,path", [
        ("get", "/openapi.json"),
        ("get", "/openapi.yaml"),
        ("get", "/docs"),
        ("head", "/redocs"),
    ])
    def test_document_path_collision_rejected(self, settings, method, path):
        router = OpenAPIRouter(settings=settings)
        getattr(router.raw, method)(path)(lambda request: {})
        with pytest.raises(SchemaDefinitionError, match="collides with a served document endpoint"):
            create_app(router, settings=settings)

    def test_other_methods_on_document_path_allowed(self, settings):
        router = OpenAPIRouter(settings=settings)
        router.raw.post("/docs")(lambda request: {"posted": True})
        with TestClient(create_app(router, settings=settings)) as client:
            assert client.post("/docs").json() == {"posted": True}
            assert "swagger-ui" in client.get("/docs").text

    def test_disabled_document_path_is_free(self):
        settings = Settings(LOG_LEVEL="WARNING", DOCS_URL="")
        router = OpenAPIRouter(settings=settings)
        router.raw.get("/docs")(lambda request: {"mine": True})
        with TestClient(create_app(router, settings=settings)) as client:
            assert client.get("/docs").json() == {"mine": True}

    def test_parameterized_route_does_not_shadow_documents(self, settings):
        router = OpenAPIRouter(settings=settings)
        router.raw.get("/:page")(lambda request: {"page": request.path_params["page"]})
        with TestClient(create_app(router, settings=settings)) as client:
            assert "swagger-ui" in client.get("/docs").text
            assert client.get("/openapi.json").json()["openapi"].startswith("3.")
            assert client.get("/about").json() == {"page": "about"}


class TestLifecycle:
    def test_create_app_seals_router(self, router, settings):
        create_app(router, settings=settings)
        assert router.sealed
        with pytest.raises(RegistryStateError):
            router.get("/late", schema=RouteSchema())(lambda request, data: data)

    def test_app_title_from_override(self, app):
        assert app.title == "Todo API"
        assert app.version == "2.0.0"

    def test_dispatch_requires_sealed_registry(self, settings):
        router = OpenAPIRouter(settings=settings)
        router.raw.get("/health")(lambda request: {"status": "ok"})
        adapter = DispatchAdapter(router.registry.entries[0], router.registry)
        with pytest.raises(RegistryStateError):
            asyncio.run(adapter.dispatch(None))
