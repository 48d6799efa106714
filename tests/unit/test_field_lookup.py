import pytest
from pydantic import BaseModel, Field
from stepinfra.services.field_lookup import has_field

class OrderInput(BaseModel):
    order_id: str = Field(alias="orderId")
    amount: int

def test_pydantic_model_class():
    assert has_field(OrderInput, "amount") is True
    assert has_field(OrderInput, "orderId") is True
    assert has_field(OrderInput, "customer") is False

def test_pydantic_model_instance():
    assert has_field(OrderInput(orderId="o-1", amount=3), "amount") is True

def test_json_object_schema():
    schema = {"type": "object", "properties": {"traceId": {"type": "string"}}}
    assert has_field(schema, "traceId") is True
    assert has_field(schema, "userId") is False

def test_json_schema_without_properties():
    assert has_field({"type": "object"}, "traceId") is False
    assert has_field({"type": "array", "items": {"type": "object"}}, "traceId") is False

def test_malformed_properties():
    with pytest.raises(TypeError):
        has_field({"type": "object", "properties": "traceId"}, "traceId")

def test_unsupported_schema():
    with pytest.raises(TypeError):
        has_field(["traceId"], "traceId")
