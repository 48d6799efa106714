import pytest
import redis
from fastapi.testclient import TestClient
from pydantic import BaseModel

from stepinfra.dependencies import get_redis
from stepinfra.main import app


class InMemoryPipeline:
    """WATCH/MULTI/EXEC over InMemoryRedis: queued writes are dropped if a watched key changed."""

    def __init__(self, owner):
        self.owner = owner
        self.watched = {}
        self.queued = []
        self.buffering = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.reset()

    def reset(self):
        self.watched = {}
        self.queued = []
        self.buffering = False

    def watch(self, *keys):
        for key in keys:
            self.watched[key] = self.owner.versions.get(key, 0)

    def unwatch(self):
        self.watched = {}

    def get(self, key):
        return self.owner.get(key)

    def multi(self):
        self.buffering = True

    def set(self, key, value, ex=None):
        self.queued.append((key, value, ex))

    def execute(self):
        changed = [k for k, v in self.watched.items() if self.owner.versions.get(k, 0) != v]
        queued = self.queued
        self.reset()
        if changed:
            raise redis.exceptions.WatchError("Watched variable changed.")
        return [self.owner.set(key, value, ex=ex) for key, value, ex in queued]


class InMemoryRedis:
    """Just enough of the redis client surface for the deployment stream."""

    def __init__(self):
        self.store = {}
        self.expiry = {}
        self.versions = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.versions[key] = self.versions.get(key, 0) + 1
        if ex:
            self.expiry[key] = ex
        return True

    def pipeline(self):
        return InMemoryPipeline(self)

    def ping(self):
        return True


class TraceInput(BaseModel):
    traceId: str


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def trace_input_schema():
    return TraceInput


@pytest.fixture
def client(fake_redis):
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
