import redis
from fastapi.testclient import TestClient


def test_get_unknown_deployment(client: TestClient):
    response = client.get("/api/v1/deployments/missing")
    assert response.status_code == 404


def test_deployment_lifecycle(client: TestClient):
    start = client.post("/api/v1/deployments/dep-1/start")
    assert start.status_code == 201
    assert start.json()["status"] == "building"

    build = client.post(
        "/api/v1/deployments/dep-1/build",
        json={"packagePath": "steps/a", "language": "node", "status": "built", "type": "event"},
    )
    assert build.status_code == 200
    assert build.json()["metadata"]["buildedSteps"] == 1

    done = client.post("/api/v1/deployments/dep-1/complete", json={"success": True})
    assert done.status_code == 200

    payload = client.get("/api/v1/deployments/dep-1").json()
    assert payload["status"] == "completed"
    assert payload["progress"] == 100
    assert payload["message"] == "Deployment completed successfully"
    assert payload["build"][0]["packagePath"] == "steps/a"


def test_upload_for_unknown_deployment(client: TestClient):
    response = client.post(
        "/api/v1/deployments/missing/upload",
        json={"packagePath": "steps/a", "language": "node", "status": "uploaded", "type": "api"},
    )
    assert response.status_code == 404


def test_invalid_build_status(client: TestClient):
    client.post("/api/v1/deployments/dep-1/start")
    response = client.post(
        "/api/v1/deployments/dep-1/build",
        json={"packagePath": "steps/a", "language": "node", "status": "done", "type": "event"},
    )
    assert response.status_code == 422


def test_state_store_unavailable(client: TestClient, fake_redis, mocker):
    mocker.patch.object(fake_redis, "get", side_effect=redis.exceptions.ConnectionError("refused"))
    response = client.get("/api/v1/deployments/dep-1")
    assert response.status_code == 503
