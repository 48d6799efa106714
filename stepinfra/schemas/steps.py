from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union
from pydantic import AfterValidator, BaseModel, ConfigDict, StrictBool, StrictStr, ValidationError
from pydantic_core import PydanticCustomError


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ObjectSchema(BaseModel):
    type: Literal["object"]
    properties: Dict[str, Any]
    required: Optional[List[StrictStr]] = None
    additionalProperties: Optional[StrictBool] = None
    description: Optional[StrictStr] = None
    title: Optional[StrictStr] = None


class ArraySchema(BaseModel):
    type: Literal["array"]
    items: ObjectSchema
    description: Optional[StrictStr] = None
    title: Optional[StrictStr] = None


def check_json_schema(value: Any) -> Any:
    """
    Shallow check of a JSON schema declared on a step.

    Object and array schemas must be well formed; any other schema (or an
    empty one) is accepted as-is.
    """
    if not value or not isinstance(value, Mapping):
        return value

    model = {"object": ObjectSchema, "array": ArraySchema}.get(value.get("type"))
    if model is None:
        return value
    try:
        model.model_validate(value)
    except ValidationError as e:
        first = e.errors(include_url=False)[0]
        location = ".".join(str(part) for part in first["loc"])
        raise PydanticCustomError(
            "json_schema",
            "Invalid {kind} schema at '{location}': {detail}",
            {"kind": value.get("type"), "location": location, "detail": first["msg"]},
        )
    return value


class EmitTopic(_StrictModel):
    topic: StrictStr
    label: Optional[StrictStr] = None
    conditional: Optional[StrictBool] = None


Emit = Union[StrictStr, EmitTopic]

JsonSchema = Annotated[Any, AfterValidator(check_json_schema)]


class QueryParam(BaseModel):
    name: StrictStr
    description: Optional[StrictStr] = None


class NoopStepConfig(_StrictModel):
    type: Literal["noop"]
    name: StrictStr
    description: Optional[StrictStr] = None
    virtualEmits: List[Emit]
    virtualSubscribes: List[StrictStr]
    flows: Optional[List[StrictStr]] = None


class EventStepConfig(_StrictModel):
    type: Literal["event"]
    name: StrictStr
    description: Optional[StrictStr] = None
    subscribes: List[StrictStr]
    emits: List[Emit]
    virtualEmits: Optional[List[Emit]] = None
    virtualSubscribes: Optional[List[StrictStr]] = None
    input: Optional[JsonSchema] = None
    flows: Optional[List[StrictStr]] = None
    includeFiles: Optional[List[StrictStr]] = None
    infrastructure: Optional[Any] = None  # validated separately


class ApiStepConfig(_StrictModel):
    type: Literal["api"]
    name: StrictStr
    description: Optional[StrictStr] = None
    path: StrictStr
    method: StrictStr
    emits: List[Emit]
    virtualEmits: Optional[List[Emit]] = None
    virtualSubscribes: Optional[List[StrictStr]] = None
    flows: Optional[List[StrictStr]] = None
    includeFiles: Optional[List[StrictStr]] = None
    middleware: Optional[List[Any]] = None
    queryParams: Optional[List[QueryParam]] = None
    bodySchema: Optional[JsonSchema] = None
    responseSchema: Optional[Dict[str, JsonSchema]] = None
    infrastructure: Optional[Any] = None


class CronStepConfig(_StrictModel):
    type: Literal["cron"]
    name: StrictStr
    description: Optional[StrictStr] = None
    cron: StrictStr
    emits: List[Emit]
    virtualEmits: Optional[List[Emit]] = None
    virtualSubscribes: Optional[List[StrictStr]] = None
    flows: Optional[List[StrictStr]] = None
    includeFiles: Optional[List[StrictStr]] = None
    infrastructure: Optional[Any] = None


STEP_CONFIG_MODELS = {
    "noop": NoopStepConfig,
    "event": EventStepConfig,
    "api": ApiStepConfig,
    "cron": CronStepConfig,
}
