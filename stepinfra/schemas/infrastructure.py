from typing import Annotated, Any, Dict, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, FiniteFloat, StrictStr, field_validator
from pydantic_core import PydanticCustomError

from stepinfra.config import MIN_RAM_MB, MAX_RAM_MB, MIN_TIMEOUT_SECONDS, MAX_TIMEOUT_SECONDS
from stepinfra.models.enums import MachineType, QueueType, RetryStrategy


def _require_number(value: Any) -> Any:
    # bool is an int subclass; "2048" must not be coerced either
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError(
            "number_type",
            "Expected number, received {received}",
            {"received": type(value).__name__},
        )
    return value


Number = Annotated[FiniteFloat, BeforeValidator(_require_number)]
Integer = Annotated[int, BeforeValidator(_require_number)]


def _out_of_range(message: str) -> PydanticCustomError:
    return PydanticCustomError("range", message)


class HandlerDescriptor(BaseModel):
    """Compute shape of a step handler. Every field is optional; absent fields are never defaulted."""

    ram: Optional[Integer] = None
    cpu: Optional[Number] = None
    timeout: Optional[Integer] = None
    machineType: Optional[MachineType] = None

    @field_validator("ram")
    @classmethod
    def ram_within_limits(cls, ram: Optional[int]) -> Optional[int]:
        if ram is None:
            return ram
        if ram < MIN_RAM_MB:
            raise _out_of_range(f"RAM must be at least {MIN_RAM_MB} MB")
        if ram > MAX_RAM_MB:
            raise _out_of_range(f"RAM cannot exceed {MAX_RAM_MB} MB")
        return ram

    @field_validator("timeout")
    @classmethod
    def timeout_within_limits(cls, timeout: Optional[int]) -> Optional[int]:
        if timeout is None:
            return timeout
        if timeout < MIN_TIMEOUT_SECONDS:
            raise _out_of_range(f"Timeout must be at least {MIN_TIMEOUT_SECONDS}s")
        if timeout > MAX_TIMEOUT_SECONDS:
            raise _out_of_range(f"Timeout cannot exceed {MAX_TIMEOUT_SECONDS}s")
        return timeout


class QueueDescriptor(BaseModel):
    """Delivery behaviour of the queue feeding a step."""

    type: Optional[QueueType] = None
    visibilityTimeout: Optional[Integer] = None
    messageGroupId: Optional[StrictStr] = None  # name of an input field, not a literal group
    maxRetries: Optional[Integer] = None
    retryStrategy: Optional[RetryStrategy] = None

    @field_validator("maxRetries")
    @classmethod
    def retries_not_negative(cls, max_retries: Optional[int]) -> Optional[int]:
        if max_retries is not None and max_retries < 0:
            raise _out_of_range("maxRetries cannot be negative")
        return max_retries


class InfrastructureDescriptor(BaseModel):
    model_config = ConfigDict(extra="forbid")

    handler: Optional[HandlerDescriptor] = None
    queue: Optional[QueueDescriptor] = None


class InfrastructureValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    infrastructure: Any = None
    input_schema: Optional[Dict[str, Any]] = Field(default=None, alias="inputSchema")
