import redis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stepinfra.logger import get_logger
from stepinfra.routers import deployments, health, validation

logger = get_logger("api")

app = FastAPI(title="Step Infrastructure Validator")

app.include_router(validation.router, prefix="/api/v1")
app.include_router(deployments.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")

@app.exception_handler(redis.exceptions.RedisError)
async def redis_unavailable(request: Request, exc: redis.exceptions.RedisError):
    logger.error("Redis error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Deployment state store unavailable"})
