import redis
from fastapi import Depends
from stepinfra.config import REDIS_URL
from stepinfra.services.deployment_stream import DeploymentStreamManager

redis_client = redis.from_url(REDIS_URL, decode_responses=True)

def get_redis():
    return redis_client

def get_deployment_stream(r=Depends(get_redis)) -> DeploymentStreamManager:
    return DeploymentStreamManager(r)
