"""Tests for parameter declarations and the validation pipeline."""
import pytest

from openapi_router.errors import ErrorCode, SchemaDefinitionError
from openapi_router.validation import (
    Arr,
    Enumeration,
    FieldError,
    FieldErrorAccumulator,
    Int,
    ParameterLocation,
    Path,
    Query,
    Str,
    ValidationError,
    ValidationPipeline,
    validate_parameters,
)


class TestDeclarations:
    def test_query_from_shorthand(self):
        declaration = Query(int)
        assert declaration.location is ParameterLocation.QUERY
        assert isinstance(declaration.schema, Int)
        assert declaration.required

    def test_explicit_options_override_instance_attributes(self):
        declaration = Query(Int(description="instance", default=1), description="explicit")
        assert declaration.schema.description == "explicit"
        assert declaration.schema.default == 1

    def test_instance_attributes_kept(self):
        declaration = Query(Int(description="instance", required=False))
        assert declaration.schema.description == "instance"
        assert not declaration.required

    def test_path_forces_required(self):
        assert Path(Int(required=False)).required
        assert Path(Int, required=False).required

    def test_schema_type_class(self):
        assert Query(Str).bind("q").validate("x").unwrap() == "x"

    def test_unknown_option(self):
        with pytest.raises(SchemaDefinitionError):
            Query(Int, minimum=3)

    def test_option_that_breaks_definition(self):
        with pytest.raises(SchemaDefinitionError):
            Query(Int, enum=[1, 2], default=5)

    def test_declaration_is_not_mutated_by_binding(self):
        declaration = Query(Int)
        bound = declaration.bind("page")
        assert bound.name == "page"
        assert declaration.name is None

    def test_to_openapi(self):
        declaration = Path(Int, description="Todo id", example=7).bind("todoId")
        assert declaration.to_openapi() == {
            "name": "todoId",
            "in": "path",
            "required": True,
            "schema": {"type": "integer", "description": "Todo id", "example": 7},
            "description": "Todo id",
            "example": 7,
        }

    def test_to_openapi_optional_query(self):
        rendered = Query(Int, default=1, required=False).bind("page").to_openapi()
        assert rendered == {
            "name": "page", "in": "query", "required": False,
            "schema": {"type": "integer", "default": 1},
        }


@pytest.fixture
def parameters():
    return {
        "todoId": Path(Int).bind("todoId"),
        "page": Query(Int, default=1, required=False).bind("page"),
        "status": Query(Enumeration(["open", "done"]), required=False).bind("status"),
        "tags": Query(Arr(str), required=False).bind("tags"),
    }


class TestPipeline:
    def test_success_builds_data_bag(self, parameters):
        result = ValidationPipeline(parameters).run(query={"status": "open"}, path={"todoId": "7"})
        assert result.unwrap() == {"todoId": 7, "page": 1, "status": "open", "tags": None}

    def test_collects_every_error_in_declaration_order(self, parameters):
        result = ValidationPipeline(parameters).run(query={"page": "abc", "status": "closed"}, path={})
        exc = result.unwrap_err()
        assert [(d.name, d.location, d.message) for d in exc.details] == [
            ("todoId", ParameterLocation.PATH, "is required"),
            ("page", ParameterLocation.QUERY, "is not a valid integer"),
            ("status", ParameterLocation.QUERY, "is not a valid enumeration value"),
        ]

    def test_location_is_respected(self, parameters):
        result = ValidationPipeline(parameters).run(query={"todoId": "7"}, path={})
        assert result.unwrap_err().details[0].name == "todoId"

    def test_scalar_takes_last_repeated_value(self, parameters):
        result = ValidationPipeline(parameters).run(query={"page": ["2", "3"]}, path={"todoId": "1"})
        assert result.unwrap()["page"] == 3

    def test_array_takes_all_values(self, parameters):
        result = ValidationPipeline(parameters).run(query={"tags": ["a", "b"]}, path={"todoId": "1"})
        assert result.unwrap()["tags"] == ["a", "b"]

    def test_empty_string_is_present(self):
        pipeline = ValidationPipeline({"page": Query(Int, default=1, required=False).bind("page")})
        assert pipeline.run(query={"page": ""}).unwrap_err().details[0].message == "is not a valid integer"

    def test_no_parameters(self):
        assert ValidationPipeline({}).run().unwrap() == {}

    def test_validate_parameters_raises(self, parameters):
        with pytest.raises(ValidationError) as info:
            validate_parameters(parameters, query={}, path={})
        assert info.value.to_dict() == {
            "errors": [{"name": "todoId", "location": "path", "message": "is required"}],
        }

    def test_validate_parameters_returns_data(self, parameters):
        assert validate_parameters(parameters, path={"todoId": "2"})["todoId"] == 2


class TestValidationError:
    def test_to_dict(self):
        exc = ValidationError([
            FieldError("page", ParameterLocation.QUERY, "is not a valid integer"),
            FieldError("todoId", ParameterLocation.PATH, "is required"),
        ])
        assert exc.to_dict() == {
            "errors": [
                {"name": "page", "location": "query", "message": "is not a valid integer"},
                {"name": "todoId", "location": "path", "message": "is required"},
            ],
        }

    def test_str(self):
        exc = ValidationError([FieldError("page", ParameterLocation.QUERY, "is required")])
        assert str(exc) == "page: is required"

    def test_to_app_error_single(self):
        exc = ValidationError([
            FieldError("page", ParameterLocation.QUERY, "is required", ErrorCode.E2001_REQUIRED_FIELD_MISSING),
        ])
        error = exc.to_app_error()
        assert error.code is ErrorCode.E2001_REQUIRED_FIELD_MISSING
        assert error.message == "page: is required"
        assert error.code.http_status == 400

    def test_to_app_error_many(self):
        exc = ValidationError([
            FieldError("a", ParameterLocation.QUERY, "is required"),
            FieldError("b", ParameterLocation.QUERY, "is required"),
        ])
        assert exc.to_app_error().metadata["error_count"] == 2


class TestAccumulator:
    def test_empty(self):
        accumulator = FieldErrorAccumulator()
        assert not accumulator.has_errors()
        assert accumulator.to_validation_error() is None

    def test_preserves_order(self):
        accumulator = FieldErrorAccumulator()
        accumulator.add_error(FieldError("b", ParameterLocation.QUERY, "is required"))
        accumulator.add_error(FieldError("a", ParameterLocation.PATH, "is required"))
        assert [d.name for d in accumulator.to_validation_error().details] == ["b", "a"]
