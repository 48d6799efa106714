import math
from typing import Any, List, Mapping, Optional
from pydantic import ValidationError

from stepinfra.config import CPU_TOLERANCE
from stepinfra.logger import get_logger
from stepinfra.models.enums import QueueType, ViolationKind
from stepinfra.schemas.infrastructure import InfrastructureDescriptor
from stepinfra.schemas.results import (
    ROOT_PATH,
    InfrastructureValidationResult,
    Violation,
    violations_from_error,
)
from stepinfra.services.cpu_resolver import ProportionalCpuResolver
from stepinfra.services.field_lookup import FieldLookup, has_field

logger = get_logger("validation")

# Nested paths ("user.id") and index access ("items[0]") are not resolvable group keys
_NESTED_KEY_MARKERS = (".", "[")


def _number(value: Any) -> Optional[float]:
    """The value if it is a usable finite number, otherwise None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        finite = math.isfinite(value)
    except OverflowError:
        # int too large for a float; its range violation comes from check_fields
        return None
    return value if finite else None


def _section(descriptor: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(descriptor, Mapping):
        return {}
    value = descriptor.get(key)
    return value if isinstance(value, Mapping) else {}


class InfrastructureConstraintValidator:
    """
    Validates the ``infrastructure`` block of a step.

    Four passes run on every call and their violations are accumulated:
    field constraints of handler and queue, handler CPU proportionality and
    the fifo grouping requirement, the visibility/handler timeout relation,
    and the message group key against the step's input schema. A failure in
    one pass never hides the findings of another.

    Nothing is raised to the caller; ``validate`` always returns a result.
    """

    def __init__(
        self,
        resolver: Optional[ProportionalCpuResolver] = None,
        field_lookup: FieldLookup = has_field,
        cpu_tolerance: float = CPU_TOLERANCE,
    ):
        self.resolver = resolver or ProportionalCpuResolver()
        self.field_lookup = field_lookup
        self.cpu_tolerance = cpu_tolerance

    def validate(self, descriptor: Any, input_schema: Any = None) -> InfrastructureValidationResult:
        try:
            violations = self._collect(descriptor, input_schema)
        except Exception as e:
            logger.exception("Unexpected failure while validating infrastructure config")
            violations = [Violation(
                path=ROOT_PATH,
                message=f"Unexpected validation error: {str(e) or type(e).__name__}",
                kind=ViolationKind.UNEXPECTED,
            )]

        if violations:
            logger.debug("Infrastructure config rejected with %d violation(s)", len(violations))
        return InfrastructureValidationResult.from_violations(violations)

    def _collect(self, descriptor: Any, input_schema: Any) -> List[Violation]:
        if descriptor is None:
            descriptor = {}

        handler = _section(descriptor, "handler")
        queue = _section(descriptor, "queue")

        violations = self.check_fields(descriptor)
        violations.extend(self.check_handler(handler))
        violations.extend(self.check_queue(queue))
        violations.extend(self.check_cross_field(handler, queue))

        group_id = queue.get("messageGroupId")
        group_violation = self.check_message_group_id(
            group_id if isinstance(group_id, str) else None,
            input_schema,
        )
        if group_violation:
            violations.append(group_violation)
        return violations

    def check_fields(self, descriptor: Any) -> List[Violation]:
        """Shape, ranges and enumerations of every supplied field."""
        try:
            InfrastructureDescriptor.model_validate(descriptor)
        except ValidationError as e:
            return violations_from_error(e)
        return []

    def check_handler(self, handler: Mapping[str, Any]) -> List[Violation]:
        ram = _number(handler.get("ram"))
        cpu = _number(handler.get("cpu"))
        if ram is None or cpu is None:
            return []

        expected = self.resolver.resolve(ram)
        if abs(cpu - expected) > self.cpu_tolerance:
            return [Violation(
                path="handler.cpu",
                message=(
                    f"CPU ({cpu} vCPU) is not proportional to RAM ({ram} MB). "
                    f"Expected approximately {expected:.2f} vCPU"
                ),
                kind=ViolationKind.PROPORTIONALITY,
            )]
        return []

    def check_queue(self, queue: Mapping[str, Any]) -> List[Violation]:
        if queue.get("type") == QueueType.FIFO.value and not queue.get("messageGroupId"):
            return [Violation(
                path="queue.messageGroupId",
                message='messageGroupId is required when queue type is "fifo"',
                kind=ViolationKind.REQUIRED_FIELD,
            )]
        return []

    def check_cross_field(self, handler: Mapping[str, Any], queue: Mapping[str, Any]) -> List[Violation]:
        visibility_timeout = _number(queue.get("visibilityTimeout"))
        timeout = _number(handler.get("timeout"))
        if visibility_timeout is None or timeout is None:
            return []

        if visibility_timeout <= timeout:
            return [Violation(
                path="queue.visibilityTimeout",
                message=(
                    f"Visibility timeout ({visibility_timeout}s) must be greater than handler timeout "
                    f"({timeout}s) to prevent premature message redelivery"
                ),
                kind=ViolationKind.CROSS_FIELD,
            )]
        return []

    def check_message_group_id(self, message_group_id: Optional[str], input_schema: Any) -> Optional[Violation]:
        """
        Checks that the group key names a top-level field of the step input.

        Returns at most one violation; the first failing rule wins.
        """
        if not message_group_id:
            return None

        path = "queue.messageGroupId"
        if input_schema is None:
            return Violation(
                path=path,
                message=f'Cannot validate messageGroupId "{message_group_id}" - step has no input schema defined',
                kind=ViolationKind.SCHEMA_UNAVAILABLE,
            )

        if any(marker in message_group_id for marker in _NESTED_KEY_MARKERS):
            return Violation(
                path=path,
                message=(
                    f'messageGroupId "{message_group_id}" must be a simple field path. '
                    "Nested paths and template expressions are not supported"
                ),
                kind=ViolationKind.KEY_PATH,
            )

        try:
            found = self.field_lookup(input_schema, message_group_id)
        except Exception as e:
            logger.warning("Input schema lookup for messageGroupId %r failed: %s", message_group_id, e)
            return Violation(
                path=path,
                message=(
                    f'Failed to validate messageGroupId "{message_group_id}" against input schema: '
                    f"{str(e) or type(e).__name__}"
                ),
                kind=ViolationKind.INTROSPECTION_FAILURE,
            )

        if not found:
            return Violation(
                path=path,
                message=f"messageGroupId \"{message_group_id}\" does not exist in step's input schema",
                kind=ViolationKind.KEY_NOT_FOUND,
            )
        return None


_default_validator = InfrastructureConstraintValidator()


def validate_infrastructure_config(
    infrastructure_config: Any,
    input_schema: Any = None,
    *,
    field_lookup: Optional[FieldLookup] = None,
) -> InfrastructureValidationResult:
    validator = _default_validator
    if field_lookup is not None:
        validator = InfrastructureConstraintValidator(field_lookup=field_lookup)
    return validator.validate(infrastructure_config, input_schema)
