from typing import Any, Mapping
from pydantic import ValidationError

from stepinfra.logger import get_logger
from stepinfra.models.enums import ViolationKind
from stepinfra.schemas.results import StepValidationResult, Violation, violations_from_error
from stepinfra.schemas.steps import STEP_CONFIG_MODELS

logger = get_logger("validation")


def validate_step(config: Any) -> StepValidationResult:
    """
    Validates a step config against the structural schema of its declared kind.

    The ``infrastructure`` block is only checked for presence here; its
    content is the concern of ``validate_infrastructure_config``.
    """
    step_type = config.get("type") if isinstance(config, Mapping) else None
    model = STEP_CONFIG_MODELS.get(step_type) if isinstance(step_type, str) else None
    if model is None:
        return StepValidationResult(
            success=False,
            error="Invalid step type",
            errors=[Violation(
                path="type",
                message=f"Step type must be one of: {', '.join(STEP_CONFIG_MODELS)}",
                kind=ViolationKind.ENUM,
            )],
        )

    try:
        model.model_validate(config)
    except ValidationError as e:
        violations = violations_from_error(e, root="config")
        logger.debug("Step %r failed structural validation: %d issue(s)", config.get("name"), len(violations))
        return StepValidationResult(
            success=False,
            error=", ".join(v.message for v in violations),
            errors=violations,
        )
    except Exception as e:
        logger.exception("Unexpected failure while validating step %r", config.get("name"))
        return StepValidationResult(
            success=False,
            error="Unexpected validation error occurred",
            errors=[Violation(path="config", message=str(e) or type(e).__name__, kind=ViolationKind.UNEXPECTED)],
        )

    return StepValidationResult(success=True)
