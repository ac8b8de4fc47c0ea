"""Sample todo service used across the test suite and by the CLI tests."""
from enum import Enum

from pydantic import BaseModel
from starlette.responses import PlainTextResponse

from openapi_router import (
    ApiResponse,
    Arr,
    DateOnly,
    Enumeration,
    FieldError,
    Int,
    OpenAPIRoute,
    OpenAPIRouter,
    Path,
    Query,
    RouteSchema,
    ValidationError,
)
from openapi_router.validation import ParameterLocation


class Priority(Enum):
    LOW = 1
    HIGH = 2


class Owner(BaseModel):
    name: str
    email: str | None = None


class Todo(BaseModel):
    id: int
    title: str
    done: bool = False
    owner: Owner | None = None


class TodoList(OpenAPIRoute):
    schema = RouteSchema(
        tags=["Todos"],
        summary="List all todos",
        parameters={
            "page": Query(Int, description="Page number", default=1, required=False),
        },
        responses={
            "200": {"page": 1, "todos": [{"id": 1, "title": "Buy milk"}]},
        },
    )

    def handle(self, request, data, **context):
        return {"page": data["page"], "todos": []}


class TodoFetch(OpenAPIRoute):
    """Fetch a single todo"""

    schema = RouteSchema(
        tags=["Todos"],
        parameters={"todoId": Path(Int, description="Todo id")},
        responses={
            "200": ApiResponse(Todo, description="The todo"),
            "404": {"error": "Not found"},
        },
    )

    async def handle(self, request, data, **context):
        return {"todoId": data["todoId"]}


class TodoComplete(OpenAPIRoute):
    schema = RouteSchema(
        tags=["Todos"],
        summary="Mark a todo as done",
        operation_id="completeTodo",
        parameters={"todoId": Path(Int)},
    )

    def handle(self, request, data, **context):
        if data["todoId"] == 0:
            raise ValidationError([FieldError("todoId", ParameterLocation.PATH, "is already complete")])
        return Todo(id=data["todoId"], title="Buy milk", done=True)


search_schema = RouteSchema(
    tags=["Search"],
    summary="Search todos",
    deprecated=True,
    parameters={
        "q": str,
        "status": Query(Enumeration(["open", "done"], enum_case_sensitive=False), required=False),
        "priority": Query(Priority, required=False),
        "tags": Query(Arr(str), required=False),
        "since": Query(DateOnly, required=False),
    },
    responses={"200": [Todo]},
)


def search_todos(request, data, **context):
    priority = data["priority"]
    return {
        "q": data["q"],
        "status": data["status"],
        "priority": priority.name if priority else None,
        "tags": data["tags"],
        "since": data["since"],
    }


def owner(request, data, store=None):
    return {"owner": store["owner"] if store else None}


def build_router(settings=None) -> OpenAPIRouter:
    router = OpenAPIRouter(
        {
            "info": {"title": "Todo API", "version": "2.0.0"},
            "servers": [{"url": "https://todos.example.com"}],
            "security": [{"bearerAuth": []}],
            "components": {
                "securitySchemes": {"bearerAuth": {"type": "http", "scheme": "bearer"}},
            },
        },
        settings=settings,
    )

    router.get("/todos")(TodoList)
    router.get("/todos/:todoId")(TodoFetch)
    router.post("/todos/:todoId/complete")(TodoComplete)
    router.get("/search", schema=search_schema)(search_todos)
    router.get("/owner", schema=RouteSchema(summary="Store owner"))(owner)

    @router.raw.get("/health")
    def health(request, **context):
        return {"status": "ok"}

    @router.raw.get("/plain")
    async def plain(request, **context):
        return PlainTextResponse("pong")

    @router.raw.get("/boom")
    def boom(request, **context):
        raise RuntimeError("kaboom")

    return router


router = build_router()


def broken_router():
    raise RuntimeError("database unavailable")
