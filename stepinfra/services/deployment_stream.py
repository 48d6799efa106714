import time
from typing import Any, Callable, List, Mapping, Optional, TypeVar
from redis.exceptions import WatchError

from stepinfra.config import DEPLOYMENT_KEY_PREFIX, DEPLOYMENT_TTL_SECONDS
from stepinfra.logger import get_logger
from stepinfra.models.enums import BuildStatus, DeploymentPhase, DeploymentStatus, UploadStatus
from stepinfra.schemas.deployment import BuildOutput, DeploymentData, DeploymentMetadata, UploadOutput

logger = get_logger("deployment")

Output = TypeVar("Output", BuildOutput, UploadOutput)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _upsert(outputs: List[Output], output: Output) -> List[Output]:
    updated = list(outputs)
    for idx, existing in enumerate(updated):
        if existing.package_path == output.package_path:
            updated[idx] = output
            return updated
    updated.append(output)
    return updated


class DeploymentStreamManager:
    """
    Keeps one JSON progress document per deployment in Redis.

    Every read-modify-write runs under WATCH/MULTI and is retried when another
    writer touched the document in between, so concurrent build and upload
    reports never overwrite each other.
    """

    def __init__(self, redis_client, key_prefix: str = DEPLOYMENT_KEY_PREFIX, ttl_seconds: int = DEPLOYMENT_TTL_SECONDS):
        self.r = redis_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, deployment_id: str) -> str:
        return f"{self.key_prefix}:{deployment_id}:data"

    def _save(self, client, data: DeploymentData):
        payload = data.model_dump_json(by_alias=True)
        if self.ttl_seconds > 0:
            client.set(self._key(data.id), payload, ex=self.ttl_seconds)
        else:
            client.set(self._key(data.id), payload)

    @staticmethod
    def _load(raw) -> Optional[DeploymentData]:
        if raw is None:
            return None
        return DeploymentData.model_validate_json(raw)

    def _transact(
        self,
        deployment_id: str,
        mutate: Callable[[Optional[DeploymentData]], Optional[DeploymentData]],
    ) -> Optional[DeploymentData]:
        """Applies ``mutate`` to the stored document atomically; None from ``mutate`` writes nothing."""
        key = self._key(deployment_id)
        while True:
            with self.r.pipeline() as pipe:
                try:
                    pipe.watch(key)
                    data = mutate(self._load(pipe.get(key)))
                    if data is None:
                        pipe.unwatch()
                        return None
                    pipe.multi()
                    self._save(pipe, data)
                    pipe.execute()
                    return data
                except WatchError:
                    logger.debug("Deployment %s changed during update, retrying", deployment_id)

    def get_deployment(self, deployment_id: str) -> Optional[DeploymentData]:
        return self._load(self.r.get(self._key(deployment_id)))

    def update_deployment(self, deployment_id: str, changes: Mapping[str, Any]) -> DeploymentData:
        """Merge ``changes`` (field names) into the stored document, creating it if needed."""
        def merge(current):
            current = current or DeploymentData(id=deployment_id)
            return DeploymentData.model_validate({**current.model_dump(), **changes, "id": deployment_id})

        return self._transact(deployment_id, merge)

    def start_deployment(self, deployment_id: str) -> DeploymentData:
        data = DeploymentData(
            id=deployment_id,
            status=DeploymentStatus.BUILDING,
            phase=DeploymentPhase.BUILD,
            started_at=_now_ms(),
            message="Starting deployment...",
        )
        self._save(self.r, data)
        logger.info("Deployment %s started", deployment_id)
        return data

    def complete_deployment(self, deployment_id: str, success: bool, error: Optional[str] = None) -> Optional[DeploymentData]:
        def complete(current):
            if not current:
                return None
            return current.model_copy(update={
                "status": DeploymentStatus.COMPLETED.value if success else DeploymentStatus.FAILED.value,
                "phase": None,
                "progress": 100,
                "message": "Deployment completed successfully" if success else f"Deployment failed: {error}",
                "completed_at": _now_ms(),
                "error": error,
            })

        data = self._transact(deployment_id, complete)
        if data:
            logger.info("Deployment %s %s", deployment_id, data.status)
        return data

    def update_build_output(self, deployment_id: str, build_output: BuildOutput) -> Optional[DeploymentData]:
        def add_build(current):
            if not current:
                return None
            build = _upsert(current.build, build_output)
            metadata = self._metadata(current, len(build))
            metadata.builded_steps = sum(1 for b in build if b.status == BuildStatus.BUILT.value)
            return current.model_copy(update={"build": build, "metadata": metadata})

        return self._transact(deployment_id, add_build)

    def update_upload_output(self, deployment_id: str, upload_output: UploadOutput) -> Optional[DeploymentData]:
        def add_upload(current):
            if not current:
                return None
            upload = _upsert(current.upload, upload_output)
            metadata = self._metadata(current, len(upload))
            metadata.uploaded_steps = sum(1 for u in upload if u.status == UploadStatus.UPLOADED.value)
            return current.model_copy(update={"upload": upload, "metadata": metadata})

        return self._transact(deployment_id, add_upload)

    @staticmethod
    def _metadata(current: DeploymentData, fallback_total: int) -> DeploymentMetadata:
        metadata = (current.metadata or DeploymentMetadata()).model_copy()
        metadata.total_steps = metadata.total_steps or fallback_total
        return metadata
