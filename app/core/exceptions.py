"""
Dashboard-wide exception hierarchy.

Services raise these types; blueprints register one handler per type and
translate them into consistent HTTP responses through ``app.utils.errors``.

Usage:
    from app.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Row", resource_id=4)
    raise ValidationError("Unknown field", details={"field": "budgetz"})

The synchronizer's own I/O failures (load and save) are never raised:
they degrade to "use defaults" or "appear unsaved".
"""


class NotFoundError(Exception):
    """Raised when a requested row or collection entry does not exist.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "Row").
        resource_id: The index or key that was looked up.
        scope: Optional container name (e.g. the row collection).
    """

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        scope: str | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.scope = scope
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id}"
        if scope is not None:
            msg += f" in {scope}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when an edit names an unknown field/collection or carries a bad value.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation is not allowed in the current state.

    Maps to HTTP 409.
    """

    def __init__(self, message: str, state: str | None = None) -> None:
        self.state = state
        super().__init__(message)


class SyncNotReadyError(ConflictError):
    """Raised when an edit arrives before the initial load has settled.

    Accepting the edit would let the pending save overwrite stored data
    with a mostly blank document.
    """

    def __init__(self, state: str) -> None:
        super().__init__(f"Report is not ready for edits (state={state})", state=state)
