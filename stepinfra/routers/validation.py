from typing import Any, Dict
from fastapi import APIRouter, Body

from stepinfra.schemas.build import BuildStepsRequest, BuildValidationReport
from stepinfra.schemas.infrastructure import InfrastructureValidationRequest
from stepinfra.schemas.results import InfrastructureValidationResult, StepValidationResult
from stepinfra.services.build_validation import validate_steps_config
from stepinfra.services.infrastructure_validator import validate_infrastructure_config
from stepinfra.services.step_validator import validate_step

router = APIRouter(prefix="/validate")

@router.post("/infrastructure", response_model=InfrastructureValidationResult, response_model_exclude_none=True)
def validate_infrastructure(req: InfrastructureValidationRequest):
    # Validation failures are a normal outcome, reported with 200
    return validate_infrastructure_config(req.infrastructure, req.input_schema)

@router.post("/step", response_model=StepValidationResult, response_model_exclude_none=True)
def validate_step_config(config: Dict[str, Any] = Body(...)):
    return validate_step(config)

@router.post("/steps", response_model=BuildValidationReport)
def validate_steps(req: BuildStepsRequest):
    return validate_steps_config(req.steps, req.project_dir)
