from enum import Enum

class MachineType(str, Enum):
    CPU = "cpu"
    MEMORY = "memory"
    GPU = "gpu"

class QueueType(str, Enum):
    STANDARD = "standard"
    FIFO = "fifo"

class RetryStrategy(str, Enum):
    NONE = "none"
    EXPONENTIAL = "exponential"
    JITTER = "jitter"

class StepType(str, Enum):
    NOOP = "noop"
    EVENT = "event"
    API = "api"
    CRON = "cron"

class ViolationKind(str, Enum):
    STRUCTURE = "structure"
    RANGE = "range"
    PROPORTIONALITY = "proportionality"
    ENUM = "enum"
    REQUIRED_FIELD = "required_field"
    CROSS_FIELD = "cross_field"
    KEY_PATH = "key_path"
    SCHEMA_UNAVAILABLE = "schema_unavailable"
    KEY_NOT_FOUND = "key_not_found"
    INTROSPECTION_FAILURE = "introspection_failure"
    UNEXPECTED = "unexpected"

class DeploymentStatus(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    UPLOADING = "uploading"
    DEPLOYING = "deploying"
    COMPLETED = "completed"
    FAILED = "failed"

class DeploymentPhase(str, Enum):
    BUILD = "build"
    UPLOAD = "upload"
    DEPLOY = "deploy"

class BuildStatus(str, Enum):
    BUILDING = "building"
    BUILT = "built"
    ERROR = "error"

class UploadStatus(str, Enum):
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    ERROR = "error"
