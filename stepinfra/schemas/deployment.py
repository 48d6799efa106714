from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from stepinfra.models.enums import BuildStatus, DeploymentPhase, DeploymentStatus, StepType, UploadStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class BuildOutput(_CamelModel):
    package_path: str
    language: str
    status: BuildStatus
    size: Optional[int] = None
    type: StepType
    error_message: Optional[str] = None


class UploadOutput(_CamelModel):
    package_path: str
    language: str
    status: UploadStatus
    size: Optional[int] = None
    progress: Optional[float] = None
    type: StepType
    error_message: Optional[str] = None


class DeploymentMetadata(_CamelModel):
    total_steps: int = 0
    uploaded_steps: Optional[int] = None
    builded_steps: Optional[int] = None


class DeploymentData(_CamelModel):
    id: str
    status: DeploymentStatus = DeploymentStatus.IDLE
    phase: Optional[DeploymentPhase] = None
    progress: float = 0
    message: str = "No deployment in progress"
    build: List[BuildOutput] = Field(default_factory=list)
    upload: List[UploadOutput] = Field(default_factory=list)
    error: Optional[str] = None
    started_at: Optional[int] = None  # epoch millis
    completed_at: Optional[int] = None
    metadata: Optional[DeploymentMetadata] = Field(default_factory=DeploymentMetadata)


class CompleteDeploymentRequest(BaseModel):
    success: bool
    error: Optional[str] = None
