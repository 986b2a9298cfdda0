"""
Error taxonomy for the scrim services.

Exceptions abort the operation. Warnings are attached to a successful result
when the caller has something to act on (nothing generated, children missing).
"""
from typing import List, Optional


class ScrimServiceError(Exception):
    """Base class for all errors raised by the scrim services"""

    code = "SCRIM_SERVICE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(ScrimServiceError):
    """Actor lacks the privilege for the requested mutation. Raised before any write."""

    code = "NOT_AUTHORIZED"


class NotFoundError(ScrimServiceError):
    code = "NOT_FOUND"


class PersistenceError(ScrimServiceError):
    """Underlying store call failed. Never retried here."""

    code = "PERSISTENCE_FAILED"


class InvalidTransitionError(ScrimServiceError):
    code = "INVALID_STATUS_TRANSITION"


class StructuralEditRefused(ScrimServiceError):
    """Games may only be added/removed while a scrim is Scheduled or In Progress"""

    code = "STRUCTURAL_EDIT_REFUSED"


class PartialFailureError(ScrimServiceError):
    """Game stubs could not be inserted; the scrims they belong to already exist."""

    code = "GAMES_NOT_CREATED"

    def __init__(self, message: str, scrim_ids: List[int]):
        super().__init__(message)
        self.scrim_ids = list(scrim_ids)


# ============================================================================
# Warnings (non-fatal)
# ============================================================================


class ServiceWarning:
    """Non-fatal outcome reported alongside a result"""

    code = "WARNING"

    def __init__(self, message: str, scrim_ids: Optional[List[int]] = None):
        self.message = message
        self.scrim_ids = list(scrim_ids) if scrim_ids else []

    def to_dict(self):
        return {"code": self.code, "message": self.message, "scrim_ids": self.scrim_ids}


class EmptyExpansionNotice(ServiceWarning):
    """Recurrence produced zero dates. Nothing was persisted."""

    code = "NO_INSTANCES_GENERATED"


class PartialFailureWarning(ServiceWarning):
    """Primary rows were created but their game stubs were not; retry per scrim."""

    code = "GAMES_NOT_CREATED"
