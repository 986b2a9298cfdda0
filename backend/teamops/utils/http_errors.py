from fastapi import HTTPException

from teamops.services.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PartialFailureError,
    PersistenceError,
    ScrimServiceError,
    StructuralEditRefused,
)

_STATUS_BY_ERROR = [
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (StructuralEditRefused, 409),
    (PartialFailureError, 503),
    (PersistenceError, 503),
]


def to_http_exception(exc: ScrimServiceError) -> HTTPException:
    """Map a service error to an HTTPException with a 'CODE: message' detail"""
    status_code = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return HTTPException(status_code=status_code, detail=f"{exc.code}: {exc.message}")
