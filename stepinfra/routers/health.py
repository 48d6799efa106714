from fastapi import APIRouter, Depends
from stepinfra.dependencies import get_redis

router = APIRouter()

@router.get("/health")
def health():
    return {"ok": True}

@router.get("/health/redis")
def health_redis(r=Depends(get_redis)):
    try:
        return {"ok": bool(r.ping())}
    except Exception as e:
        return {"ok": False, "error": str(e)}
