# backend/gehl/services/persistence/base.py
import logging
from typing import Any, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"

_REDACTED_KEYS = {"password", "pass", "hash"}


def redact(params: Optional[Mapping[str, Any]]) -> dict:
    if not params:
        return {}
    return {k: ("***" if k in _REDACTED_KEYS else v) for k, v in params.items()}


def sqlstate(error: SQLAlchemyError) -> Optional[str]:
    orig = getattr(error, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_foreign_key_violation(error: SQLAlchemyError) -> bool:
    return isinstance(error, IntegrityError) and sqlstate(error) == FOREIGN_KEY_VIOLATION


def execute(db: Session, sql: str, params: Optional[Mapping[str, Any]] = None):
    """Run one parameterised statement, logging it with its parameters on failure."""
    try:
        return db.execute(text(sql), dict(params or {}))
    except SQLAlchemyError as e:
        logger.error("[sql %s] [params %s] %s", sql, redact(params), e)
        raise


def commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error("commit failed: %s", e)
        db.rollback()
        raise
