from fastapi import APIRouter, Depends, HTTPException

from stepinfra.dependencies import get_deployment_stream
from stepinfra.schemas.deployment import BuildOutput, CompleteDeploymentRequest, DeploymentData, UploadOutput
from stepinfra.services.deployment_stream import DeploymentStreamManager

router = APIRouter(prefix="/deployments")

def _found(data):
    if data is None:
        raise HTTPException(404, "Deployment not found")
    return data

@router.get("/{deployment_id}", response_model=DeploymentData)
def get_deployment(deployment_id: str, stream: DeploymentStreamManager = Depends(get_deployment_stream)):
    return _found(stream.get_deployment(deployment_id))

@router.post("/{deployment_id}/start", status_code=201, response_model=DeploymentData)
def start_deployment(deployment_id: str, stream: DeploymentStreamManager = Depends(get_deployment_stream)):
    return stream.start_deployment(deployment_id)

@router.post("/{deployment_id}/build", response_model=DeploymentData)
def report_build(deployment_id: str, output: BuildOutput,
                 stream: DeploymentStreamManager = Depends(get_deployment_stream)):
    return _found(stream.update_build_output(deployment_id, output))

@router.post("/{deployment_id}/upload", response_model=DeploymentData)
def report_upload(deployment_id: str, output: UploadOutput,
                  stream: DeploymentStreamManager = Depends(get_deployment_stream)):
    return _found(stream.update_upload_output(deployment_id, output))

@router.post("/{deployment_id}/complete", response_model=DeploymentData)
def complete_deployment(deployment_id: str, req: CompleteDeploymentRequest,
                        stream: DeploymentStreamManager = Depends(get_deployment_stream)):
    return _found(stream.complete_deployment(deployment_id, req.success, req.error))
