from __future__ import annotations

from dataclasses import dataclass


class LifecycleError(Exception):
    error_code = "lifecycle_error"


@dataclass(slots=True)
class NotFoundError(LifecycleError):
    request_id: str

    error_code = "not_found"

    def __str__(self) -> str:
        return f"Print request not found: {self.request_id}"


@dataclass(slots=True)
class InvalidTransitionError(LifecycleError):
    current: str
    action: str

    error_code = "invalid_transition"

    def __str__(self) -> str:
        return f"Invalid transition: {self.action} is not allowed from {self.current}"


@dataclass(slots=True)
class ForbiddenError(LifecycleError):
    actor_id: str
    action: str
    reason: str = ""

    error_code = "forbidden"

    def __str__(self) -> str:
        message = f"Actor {self.actor_id} may not {self.action}"
        if self.reason:
            message += f": {self.reason}"
        return message


@dataclass(slots=True)
class ValidationError(LifecycleError):
    field: str
    code: str
    message: str = ""

    error_code = "validation_error"

    def __str__(self) -> str:
        if self.message:
            return f"Invalid {self.field} ({self.code}): {self.message}"
        return f"Invalid {self.field} ({self.code})"


@dataclass(slots=True)
class ConflictError(LifecycleError):
    request_id: str
    expected_version: int | None = None

    error_code = "conflict"

    def __str__(self) -> str:
        if self.expected_version is None:
            return f"Concurrent modification of print request {self.request_id}"
        return (
            f"Concurrent modification of print request {self.request_id}: "
            f"expected version {self.expected_version}"
        )


@dataclass(slots=True)
class AlreadyReviewedError(LifecycleError):
    request_id: str

    error_code = "already_reviewed"

    def __str__(self) -> str:
        return f"Print request {self.request_id} has already been reviewed"
