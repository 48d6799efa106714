import os
from types import MappingProxyType
from dotenv import load_dotenv

load_dotenv()

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Deployment progress documents
DEPLOYMENT_KEY_PREFIX = os.getenv("DEPLOYMENT_KEY_PREFIX", "deployment")
DEPLOYMENT_TTL_SECONDS = int(os.getenv("DEPLOYMENT_TTL_SECONDS", "86400"))  # 0 = keep forever

# Provider limits for a single handler invocation
MIN_RAM_MB = 128
MAX_RAM_MB = 10240
MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 900

# Absolute difference allowed between declared and proportional CPU
CPU_TOLERANCE = 0.1

# RAM (MB) -> vCPU allocation tiers
LAMBDA_CPU_RATIO = MappingProxyType({
    128: 0.0625,
    256: 0.125,
    512: 0.25,
    1024: 0.5,
    1536: 0.75,
    2048: 1,
    3008: 1.5,
    4096: 2,
    5120: 2.5,
    6144: 3,
    7168: 3.5,
    8192: 4,
    9216: 4.5,
    10240: 5,
})

# Step kinds that are fed by a queue
QUEUE_STEP_TYPES = frozenset({"event"})
