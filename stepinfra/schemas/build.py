from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BuildStep(_CamelModel):
    """A discovered step file as handed over by the build pipeline."""
    file_path: str
    config: Dict[str, Any] = Field(default_factory=dict)


class BuildStepsRequest(_CamelModel):
    project_dir: str
    steps: Dict[str, BuildStep]  # keyed by step name


class BuildIssue(_CamelModel):
    step_name: str
    file_path: str
    relative_path: str
    path: str
    message: str


class BuildValidationReport(_CamelModel):
    errors: List[BuildIssue] = Field(default_factory=list)
    warnings: List[BuildIssue] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors
