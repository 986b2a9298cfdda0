"""
SQL utilities for consistent handling of query results and commits.

SQLModel/SQLAlchemy may return COUNT results as int or as a 1-tuple/Row.
Use scalar_int() to safely coerce to int everywhere.
"""
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from teamops.services.errors import PersistenceError

logger = logging.getLogger(__name__)


def scalar_int(x: Any) -> int:
    """Convert COUNT/aggregate result to int. Handles int, None or 1-tuple/Row."""
    if x is None:
        return 0
    try:
        return int(x[0] or 0)
    except TypeError:
        return int(x)


def commit_or_raise(session: Session, action: str) -> None:
    """Commit, or roll back and raise PersistenceError naming the failed action."""
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(f"Failed to {action}: {exc}") from exc
