"""
Application-wide exception hierarchy.

Services raise these types; the app registers one error handler per type
(see ``flange_qc.utils.errors.register_error_handlers``) so every endpoint
maps them to the same HTTP status and error code.

Usage:
    from flange_qc.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Workpack", resource_id=42)
    raise ValidationError("name is required", details={"name": "blank"})
"""


class NotFoundError(Exception):
    """Raised when a referenced id does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Customer", "Flange").
        resource_id: The primary key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when well-formed input violates a business rule.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidTransitionError(ValidationError):
    """Raised when a sign-off stage would be skipped or moved backwards.

    Maps to HTTP 409; ``details`` carries the current and requested status.
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None,
        current: str | None,
        target: str,
        reason: str | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.current_status = current
        self.target_status = target
        self.reason = reason
        msg = f"Cannot move {resource} id={resource_id} from '{current}' to '{target}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, details={"from": current, "to": target})


class ConflictError(Exception):
    """Raised when an operation would violate a unique constraint.

    Maps to HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class StorageError(Exception):
    """Raised when the database rejects or fails a read/write.

    The underlying SQLAlchemy exception is kept on ``cause`` for logging; it
    never reaches the HTTP response body. Maps to HTTP 500.
    """

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage failure during {operation}")
