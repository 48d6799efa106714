import os
from typing import Any, Dict, Mapping, Optional

from stepinfra.config import QUEUE_STEP_TYPES
from stepinfra.logger import get_logger
from stepinfra.schemas.build import BuildIssue, BuildStep, BuildValidationReport
from stepinfra.services.infrastructure_validator import validate_infrastructure_config
from stepinfra.services.step_validator import validate_step

logger = get_logger("build")


class BuildValidator:
    """
    Validates every discovered step before packaging.

    Step structure and infrastructure problems are errors. Queue settings on a
    step kind that is not fed by a queue are only reported as warnings, since
    the deployment simply ignores them.
    """

    def __init__(self, project_dir: str):
        self.project_dir = project_dir

    def validate(self, steps: Mapping[str, BuildStep]) -> BuildValidationReport:
        report = BuildValidationReport()
        for step_name, step in steps.items():
            self._validate_one(step_name, step, report)

        if report.errors:
            logger.info("Build validation found %d error(s) across %d step(s)", len(report.errors), len(steps))
        return report

    def _validate_one(self, step_name: str, step: BuildStep, report: BuildValidationReport):
        config = step.config

        structure = validate_step(config)
        if not structure.success:
            for violation in structure.errors or []:
                report.errors.append(self._issue(step_name, step, violation.path, violation.message))

        infrastructure = config.get("infrastructure")
        if infrastructure is None:
            return

        step_type = config.get("type")
        if isinstance(infrastructure, Mapping) and infrastructure.get("queue") is not None \
                and step_type not in QUEUE_STEP_TYPES:
            report.warnings.append(self._issue(
                step_name, step, "infrastructure.queue",
                f"Queue configuration is only applicable to Event steps and is ignored for {step_type} steps",
            ))

        result = validate_infrastructure_config(infrastructure, _input_schema(config))
        for violation in result.errors or []:
            report.errors.append(self._issue(step_name, step, violation.path, violation.message))

    def _issue(self, step_name: str, step: BuildStep, path: str, message: str) -> BuildIssue:
        relative_path = os.path.relpath(step.file_path, self.project_dir)
        return BuildIssue(
            step_name=step_name,
            file_path=step.file_path,
            relative_path=relative_path,
            path=path,
            message=f'Step "{step_name}" ({relative_path}) {path}: {message}',
        )


def _input_schema(config: Dict[str, Any]) -> Optional[Any]:
    # an empty schema declares nothing to group on
    return config.get("input") or None


def validate_steps_config(steps: Mapping[str, BuildStep], project_dir: str) -> BuildValidationReport:
    return BuildValidator(project_dir).validate(steps)
