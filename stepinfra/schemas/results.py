from pydantic import BaseModel, ValidationError
from typing import Iterable, List, Optional, Sequence, Union

from stepinfra.models.enums import ViolationKind

ROOT_PATH = "infrastructure"

# pydantic error types that map to a dedicated violation kind; the rest are structural
_ERROR_KINDS = {
    "range": ViolationKind.RANGE,
    "enum": ViolationKind.ENUM,
    "literal_error": ViolationKind.ENUM,
}


class Violation(BaseModel):
    path: str  # dotted, e.g. "handler.ram"
    message: str
    kind: ViolationKind


class InfrastructureValidationResult(BaseModel):
    success: bool
    errors: Optional[List[Violation]] = None

    @classmethod
    def from_violations(cls, violations: Sequence[Violation]) -> "InfrastructureValidationResult":
        if not violations:
            return cls(success=True)
        return cls(success=False, errors=list(violations))


class StepValidationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    errors: Optional[List[Violation]] = None


def dotted_path(loc: Iterable[Union[str, int]], root: str = ROOT_PATH) -> str:
    path = ".".join(str(part) for part in loc)
    return path or root


def violations_from_error(exc: ValidationError, root: str = ROOT_PATH) -> List[Violation]:
    """Flattens a pydantic ValidationError into one Violation per reported problem."""
    return [
        Violation(
            path=dotted_path(err["loc"], root),
            message=err["msg"],
            kind=_ERROR_KINDS.get(err["type"], ViolationKind.STRUCTURE),
        )
        for err in exc.errors(include_url=False)
    ]
