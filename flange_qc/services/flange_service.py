"""Flange repository service: create, patch, list and delete flange rows.

Update semantics:
    Both update surfaces are field-level patches. Only keys present in the
    payload are written; a key sent as null clears that column. Keys outside
    the surface are ignored. Neither surface validates stage ordering: they
    are the raw bulk-edit path. Validated stage moves go through
    ``signoff_workflow.advance``.

Listing semantics:
    list_by_workpack / list_by_project inner-join the workpack, so flanges
    whose workpack was deleted drop out of them. list_all and get_flange
    still return those orphans.
"""

from __future__ import annotations

import logging

from sqlalchemy import func

from flange_qc.core.exceptions import NotFoundError, ValidationError
from flange_qc.models import db
from flange_qc.models.flange import (
    SIGNOFF_FIELDS,
    SIGNOFF_STAGES,
    VALID_STATUSES,
    Flange,
    FlangeStatus,
)
from flange_qc.models.hierarchy import Workpack
from flange_qc.utils.helpers import as_text, commit_or_raise

logger = logging.getLogger(__name__)


_SIGNOFF_COLUMNS = tuple(f"{stage}_{f}" for stage in SIGNOFF_STAGES for f in SIGNOFF_FIELDS)

# General edit surface (PUT /flanges/<id>)
UPDATE_FIELDS = (
    "flange_id", "tag", "isometric", "pid", "rating", "type", "gasket",
    "material", "size", "bolt_size", "k_factor", "yield_strength", "torque",
    "comments", "status", "workpack_id",
)

# Details surface (PUT /flanges/<id>/details): QA, pass and sign-off fields
DETAIL_FIELDS = (
    "flange_id", "tag", "system", "pid", "isometric", "facility", "workpack_name",
    "torque_or_tension", "equipment_manufacturer", "equipment_quantity",
    "wrench_size", "toolcerts",
    "size", "type", "rating", "gasket", "stud_spec", "bolt_size", "nut_spec",
    "nut_size", "washer", "lubricant", "torque",
    "pass1", "pass2", "pass3", "roundpass", "finalpass",
    *_SIGNOFF_COLUMNS,
    "status",
)

# Everything a new row may be created with
CREATE_FIELDS = tuple(dict.fromkeys(UPDATE_FIELDS + DETAIL_FIELDS))


# ── Internal helpers ──────────────────────────────────────────────────────────


def _require_workpack(workpack_id) -> Workpack:
    if workpack_id is None:
        raise ValidationError("workpack_id is required", details={"workpack_id": "missing"})
    try:
        workpack_id = int(workpack_id)
    except (TypeError, ValueError):
        raise ValidationError(
            "workpack_id must be an integer", details={"workpack_id": workpack_id},
        ) from None
    workpack = db.session.get(Workpack, workpack_id)
    if workpack is None:
        raise NotFoundError("Workpack", workpack_id)
    return workpack


def _check_status(status) -> str | None:
    if status is None:
        return None
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise ValidationError(
            f"Unknown status '{status}'",
            details={"status": status, "valid_statuses": sorted(VALID_STATUSES)},
        )
    return status


def _apply_fields(flange: Flange, data: dict, allowed: tuple[str, ...]) -> list[str]:
    """Write present keys from ``data`` onto ``flange``; return the names written.

    Every value is validated before the first attribute is touched, so a
    rejected payload leaves the row unchanged.
    """
    updates = {}
    for field in allowed:
        if field not in data:
            continue
        value = data[field]
        if field == "workpack_id":
            value = _require_workpack(value).id
        elif field == "status":
            value = _check_status(value)
        else:
            value = as_text(value)
        updates[field] = value
    for field, value in updates.items():
        setattr(flange, field, value)
    return list(updates)


# ── Reads ─────────────────────────────────────────────────────────────────────


def get_flange(flange_id: int) -> Flange:
    """Return a flange by id, orphaned or not.

    Raises:
        NotFoundError: no row with this id.
    """
    flange = db.session.get(Flange, flange_id)
    if flange is None:
        raise NotFoundError("Flange", flange_id)
    return flange


def list_by_workpack(workpack_id: int) -> list[Flange]:
    return (
        Flange.query
        .join(Workpack, Workpack.id == Flange.workpack_id)
        .filter(Flange.workpack_id == workpack_id)
        .order_by(Flange.id.asc())
        .all()
    )


def list_by_project(project_id: int) -> list[Flange]:
    return (
        Flange.query
        .join(Workpack, Workpack.id == Flange.workpack_id)
        .filter(Workpack.project_id == project_id)
        .order_by(Flange.id.asc())
        .all()
    )


def list_all() -> list[Flange]:
    return Flange.query.order_by(Flange.id.asc()).all()


def status_summary(workpack_id: int) -> dict:
    """Count a workpack's flanges per status.

    Returns:
        {"workpack_id", "total", "by_status": {status: count, ...}}
        Every known status is present; legacy rows without a status count
        as pending.
    """
    rows = (
        db.session.query(Flange.status, func.count(Flange.id))
        .join(Workpack, Workpack.id == Flange.workpack_id)
        .filter(Flange.workpack_id == workpack_id)
        .group_by(Flange.status)
        .all()
    )
    by_status = {s.value: 0 for s in FlangeStatus}
    for status, count in rows:
        key = status or FlangeStatus.PENDING.value
        by_status[key] = by_status.get(key, 0) + count
    return {
        "workpack_id": workpack_id,
        "total": sum(by_status.values()),
        "by_status": by_status,
    }


# ── Writes ────────────────────────────────────────────────────────────────────


def create_flange(workpack_id, data: dict | None = None) -> Flange:
    """Insert a flange under an existing workpack.

    Args:
        workpack_id: Owning workpack (must exist).
        data: Snake_case attributes; unknown keys are ignored. flange_id and
              tag may be empty. Numeric-looking values are stored as text.

    Raises:
        NotFoundError: workpack does not exist.
        ValidationError: unknown status.
    """
    data = dict(data or {})
    data.pop("workpack_id", None)
    workpack = _require_workpack(workpack_id)

    flange = Flange(workpack_id=workpack.id, status=FlangeStatus.PENDING.value)
    _apply_fields(flange, data, CREATE_FIELDS)
    if flange.status is None:
        flange.status = FlangeStatus.PENDING.value

    db.session.add(flange)
    commit_or_raise("create flange")
    logger.info("Flange created id=%s tag=%r workpack_id=%s", flange.id, flange.tag, flange.workpack_id)
    return flange


def update_flange(flange_id: int, data: dict) -> Flange:
    """Patch the general edit surface (identity, joint spec, comments, status, workpack)."""
    flange = get_flange(flange_id)
    if "workpack_id" in data and data["workpack_id"] is None:
        raise ValidationError("workpack_id cannot be cleared", details={"workpack_id": None})
    written = _apply_fields(flange, data, UPDATE_FIELDS)
    commit_or_raise("update flange")
    logger.info("Flange updated id=%s fields=%s", flange.id, ",".join(written) or "-")
    return flange


def update_flange_details(flange_id: int, data: dict) -> Flange:
    """Patch the details surface (QA, passes, sign-off columns, status)."""
    flange = get_flange(flange_id)
    written = _apply_fields(flange, data, DETAIL_FIELDS)
    commit_or_raise("update flange details")
    logger.info("Flange details updated id=%s fields=%d", flange.id, len(written))
    return flange


def set_toolcert_path(flange_id: int, path: str) -> Flange:
    """Store the reference produced by the tool-cert file storage."""
    flange = get_flange(flange_id)
    flange.toolcerts = path
    commit_or_raise("set toolcert path")
    logger.info("Flange toolcert linked id=%s path=%s", flange.id, path)
    return flange


def delete_flange(flange_id: int) -> None:
    flange = get_flange(flange_id)
    db.session.delete(flange)
    commit_or_raise("delete flange")
    logger.info("Flange deleted id=%s", flange_id)
