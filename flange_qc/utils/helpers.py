"""Shared helpers for services and blueprints.

commit_or_raise:    commit the session, translating SQLAlchemy failures
normalize_payload:  accept camelCase request keys from legacy clients
query_int:          read an integer query param under any of several names
body_int:           read a required integer field from a request body
"""

import logging
import re

from flask import request

from flange_qc.core.exceptions import ConflictError, StorageError, ValidationError
from flange_qc.models import db

logger = logging.getLogger(__name__)


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_raise(operation: str, *, conflict: tuple[str, str, str] | None = None) -> None:
    """Commit the current session or roll back and raise.

    Args:
        operation: Short label used in logs and in the StorageError message.
        conflict: Optional ``(resource, field, value)``. When given, an
            IntegrityError is reported as ConflictError instead of StorageError.

    IntegrityError   → ConflictError (when ``conflict`` given) / StorageError
    OperationalError → StorageError
    Other SQLAlchemy → StorageError
    """
    from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on %s: %s", operation, exc.orig)
        if conflict:
            raise ConflictError(*conflict) from exc
        raise StorageError(operation, exc) from exc
    except OperationalError as exc:
        db.session.rollback()
        logger.exception("Database operational error on %s", operation)
        raise StorageError(operation, exc) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Unexpected database error on %s", operation)
        raise StorageError(operation, exc) from exc


# ── Request payload helpers ──────────────────────────────────────────────────

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Keys whose legacy spelling does not split cleanly on case boundaries
_KEY_ALIASES = {
    "torqueortension": "torque_or_tension",
}


def to_snake(key: str) -> str:
    """``boltSize`` → ``bolt_size``, ``Pass1`` → ``pass1``, ``qcName`` → ``qc_name``."""
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def normalize_payload(data: dict | None) -> dict:
    """Return a copy of a request body with every key in snake_case.

    When both spellings of a key are sent, the snake_case one wins.

    Raises:
        ValidationError: the body is a JSON array or scalar.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", details={"body": type(data).__name__})
    result = {}
    for key, value in data.items():
        snake = to_snake(key)
        if snake in result and key != snake:
            continue
        result[snake] = value
    return result


def as_text(value):
    """Store numbers and booleans from JSON as text; keep None as None."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


def query_int(*names):
    """First integer query parameter found under ``names``, else None."""
    for name in names:
        value = request.args.get(name, type=int)
        if value is not None:
            return value
    return None


def body_int(data: dict, name: str, *, required: bool = True):
    """Integer field from a normalised request body.

    Raises:
        ValidationError: missing (when required) or not an integer.
    """
    value = data.get(name)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{name} is required", details={name: "missing"})
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer", details={name: value})
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", details={name: value}) from None
