import json
from stepinfra.schemas.deployment import BuildOutput, UploadOutput
from stepinfra.services.deployment_stream import DeploymentStreamManager

def _build(path, status="building"):
    return BuildOutput(package_path=path, language="node", status=status, type="event")

def test_get_missing_deployment(fake_redis):
    assert DeploymentStreamManager(fake_redis).get_deployment("dep-1") is None

def test_start_deployment(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    data = stream.start_deployment("dep-1")

    assert data.status == "building"
    assert data.phase == "build"
    assert data.message == "Starting deployment..."
    assert isinstance(data.started_at, int)

    stored = json.loads(fake_redis.store["deployment:dep-1:data"])
    assert stored["id"] == "dep-1"
    assert stored["startedAt"] == data.started_at
    assert fake_redis.expiry["deployment:dep-1:data"] == 86400

def test_update_creates_default_document(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    data = stream.update_deployment("dep-1", {"message": "queued", "id": "other"})
    assert data.id == "dep-1"
    assert data.status == "idle"
    assert data.message == "queued"
    assert stream.get_deployment("dep-1").message == "queued"

def test_build_outputs_upserted_and_counted(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    stream.start_deployment("dep-1")
    stream.update_deployment("dep-1", {"metadata": {"total_steps": 4}})

    stream.update_build_output("dep-1", _build("steps/a"))
    stream.update_build_output("dep-1", _build("steps/b"))
    data = stream.update_build_output("dep-1", _build("steps/a", "built"))

    assert [b.package_path for b in data.build] == ["steps/a", "steps/b"]
    assert data.build[0].status == "built"
    assert data.metadata.builded_steps == 1
    assert data.metadata.total_steps == 4

def test_total_steps_falls_back_to_output_count(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    stream.start_deployment("dep-1")
    upload = UploadOutput(package_path="steps/a", language="python", status="uploaded", type="api", progress=100)
    data = stream.update_upload_output("dep-1", upload)
    assert data.metadata.uploaded_steps == 1
    assert data.metadata.total_steps == 1

def test_outputs_ignored_for_unknown_deployment(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    assert stream.update_build_output("missing", _build("steps/a")) is None
    assert stream.complete_deployment("missing", True) is None
    assert fake_redis.store == {}

def test_complete_deployment(fake_redis):
    stream = DeploymentStreamManager(fake_redis)
    stream.start_deployment("dep-1")
    data = stream.complete_deployment("dep-1", False, "upload timed out")

    assert data.status == "failed"
    assert data.phase is None
    assert data.progress == 100
    assert data.message == "Deployment failed: upload timed out"
    assert data.error == "upload timed out"
    assert data.completed_at >= data.started_at
    assert stream.get_deployment("dep-1").status == "failed"

def test_no_expiry_when_ttl_disabled(fake_redis):
    DeploymentStreamManager(fake_redis, ttl_seconds=0).start_deployment("dep-1")
    assert "deployment:dep-1:data" in fake_redis.store
    assert fake_redis.expiry == {}

def test_concurrent_build_reports_are_not_lost(fake_redis, mocker):
    stream = DeploymentStreamManager(fake_redis)
    other = DeploymentStreamManager(fake_redis)
    stream.start_deployment("dep-1")

    real_get = fake_redis.get
    raced = []

    def get_then_race(key):
        raw = real_get(key)
        if not raced:
            raced.append(key)
            other.update_build_output("dep-1", _build("steps/b"))
        return raw

    mocker.patch.object(fake_redis, "get", side_effect=get_then_race)
    data = stream.update_build_output("dep-1", _build("steps/a"))

    assert {b.package_path for b in data.build} == {"steps/a", "steps/b"}
    assert {b.package_path for b in stream.get_deployment("dep-1").build} == {"steps/a", "steps/b"}
    assert data.metadata.total_steps == 2

def test_completion_retried_after_concurrent_upload(fake_redis, mocker):
    stream = DeploymentStreamManager(fake_redis)
    stream.start_deployment("dep-1")
    upload = UploadOutput(package_path="steps/a", language="python", status="uploaded", type="api", progress=100)

    real_get = fake_redis.get
    raced = []

    def get_then_race(key):
        raw = real_get(key)
        if not raced:
            raced.append(key)
            DeploymentStreamManager(fake_redis).update_upload_output("dep-1", upload)
        return raw

    mocker.patch.object(fake_redis, "get", side_effect=get_then_race)
    data = stream.complete_deployment("dep-1", True)

    assert data.status == "completed"
    assert [u.package_path for u in data.upload] == ["steps/a"]
    assert data.metadata.uploaded_steps == 1
