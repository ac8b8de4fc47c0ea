"""Response shape rendering.

A response shape is a small tree describing the payload a route returns:

- SchemaType instances and type shorthands render as their JSON Schema
- literal values (``"abc"``, ``7``, ``1.5``, ``True``) render as their type
  with the literal as the example
- mappings render as objects, one property per key
- a single-element list renders as an array of that element
- pydantic models render as ``$ref``s into ``components.schemas``

Usage:
    components: dict = {}
    render_shape({"todos": [{"id": 1, "title": "Buy milk"}]}, components)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from openapi_router.errors import SchemaDefinitionError
from openapi_router.validation import Bool, Int, Num, SchemaType, Str, to_schema_type

REF_TEMPLATE = "#/components/schemas/{model}"


def render_shape(shape: Any, components: dict[str, Any]) -> dict[str, Any]:
    """Render a response shape tree as a JSON Schema fragment.

    Model schemas are added to ``components`` (keyed by model name).
    """
    if isinstance(shape, SchemaType):
        return shape.to_json_schema()
    if isinstance(shape, type) and issubclass(shape, BaseModel):
        return _model_ref(shape, components)
    if isinstance(shape, Mapping):
        return {
            "type": "object",
            "properties": {str(key): render_shape(value, components) for key, value in shape.items()},
        }
    if isinstance(shape, (list, tuple)):
        if len(shape) != 1:
            raise SchemaDefinitionError(
                f"Array shapes take exactly one element describing the items, got {len(shape)}")
        return {"type": "array", "items": render_shape(shape[0], components)}
    if isinstance(shape, type):
        return to_schema_type(shape).to_json_schema()
    return example_schema_type(shape).to_json_schema()


def example_schema_type(value: Any) -> SchemaType:
    """SchemaType for a literal example value."""
    if isinstance(value, bool):
        return Bool(example=value)
    if isinstance(value, int):
        return Int(example=value)
    if isinstance(value, float):
        return Num(example=value)
    if isinstance(value, str):
        return Str(example=value)
    raise SchemaDefinitionError(f"Unsupported response shape: {value!r}", value=repr(value))


def _model_ref(model: type[BaseModel], components: dict[str, Any]) -> dict[str, str]:
    name = model.__name__
    if name not in components:
        schema = model.model_json_schema(ref_template=REF_TEMPLATE)
        for def_name, definition in schema.pop("$defs", {}).items():
            components.setdefault(def_name, definition)
        components[name] = schema
    return {"$ref": REF_TEMPLATE.format(model=name)}
