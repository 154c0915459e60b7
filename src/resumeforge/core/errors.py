from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


class DocumentValidationError(ValueError):
    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        summary = "; ".join(f"{error.field}: {error.message}" for error in errors)
        super().__init__(f"Validation failed: {summary}")

    def as_dicts(self) -> list[dict[str, str]]:
        return [asdict(error) for error in self.errors]


class VersionConflictError(RuntimeError):
    def __init__(self, resume_id: str, expected: int | None = None, actual: int | None = None):
        self.resume_id = resume_id
        self.expected = expected
        self.actual = actual
        if expected is None:
            message = f"Resume {resume_id} was modified concurrently"
        else:
            message = f"Resume {resume_id} is at version {actual}, expected {expected}"
        super().__init__(message)
