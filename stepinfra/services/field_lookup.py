from typing import Any, Callable, Mapping
from pydantic import BaseModel

# (input_schema, field_name) -> does the schema declare that top-level field
FieldLookup = Callable[[Any, str], bool]


def has_field(schema: Any, name: str) -> bool:
    """
    Default field lookup for the schema kinds steps are written with.

    Supports pydantic model classes and instances, and JSON-schema style
    dictionaries (``{"type": "object", "properties": {...}}``). A JSON schema
    describing anything other than an object declares no named fields.

    Raises:
        TypeError: the schema is of a kind this lookup cannot inspect,
            or its ``properties`` are not a mapping.
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return _model_has_field(schema, name)
    if isinstance(schema, BaseModel):
        return _model_has_field(type(schema), name)

    if isinstance(schema, Mapping):
        if schema.get("type", "object") != "object" and "properties" not in schema:
            return False
        properties = schema.get("properties")
        if properties is None:
            return False
        if not isinstance(properties, Mapping):
            raise TypeError(f"input schema properties must be a mapping, got {type(properties).__name__}")
        return name in properties

    raise TypeError(f"unsupported input schema type: {type(schema).__name__}")


def _model_has_field(model: type, name: str) -> bool:
    fields = model.model_fields
    if name in fields:
        return True
    return any(info.alias == name for info in fields.values())
