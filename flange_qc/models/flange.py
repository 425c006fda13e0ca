"""Flange (bolted joint) model and its sign-off state machine constants.

A flange moves through the sign-off stages

    pending -> breakout -> assembled -> tightened -> qc -> client -> complete

Each of the five working stages owns one SignoffEntry slot, stored as five
text columns (``<stage>_name``, ``_signature``, ``_date``, ``_company``,
``_notes``). Technical joint attributes are kept as free text: the domain
uses values like "150#" or '3/4"' that must round-trip verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum

from flange_qc.models import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Status / stage constants ─────────────────────────────────────────────────


class FlangeStatus(str, Enum):
    PENDING = "pending"
    BREAKOUT = "breakout"
    ASSEMBLED = "assembled"
    TIGHTENED = "tightened"
    QC = "qc"
    CLIENT = "client"
    COMPLETE = "complete"


VALID_STATUSES = frozenset(s.value for s in FlangeStatus)

# Ordered stages that carry a SignoffEntry slot
SIGNOFF_STAGES = ("breakout", "assembled", "tightened", "qc", "client")

SIGNOFF_FIELDS = ("name", "signature", "date", "company", "notes")

# Allowed targets for a validated stage advance, keyed by current status.
# Each stage may be re-submitted (idempotent correction of its entry);
# a complete flange may only correct the client acceptance.
FLANGE_TRANSITIONS = {
    "pending":   ["breakout"],
    "breakout":  ["breakout", "assembled"],
    "assembled": ["assembled", "tightened"],
    "tightened": ["tightened", "qc"],
    "qc":        ["qc", "client"],
    "client":    ["client"],
    "complete":  ["client"],
}

PASS_NUMBERS = (1, 2, 3)

ROUNDPASS_COMPLETE = "complete"


def validate_stage_transition(current_status, target_stage):
    """Return True if a flange at ``current_status`` may advance to ``target_stage``."""
    return target_stage in FLANGE_TRANSITIONS.get(current_status, [])


@dataclass
class SignoffEntry:
    """One party's attestation at one stage. All fields are optional text."""

    name: str | None = None
    signature: str | None = None
    date: str | None = None
    company: str | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "SignoffEntry":
        data = data or {}
        return cls(**{
            f: (str(data[f]) if data.get(f) is not None else None)
            for f in SIGNOFF_FIELDS
            if f in data
        })

    def is_empty(self) -> bool:
        return not any((getattr(self, f.name) or "").strip() for f in fields(self))

    @property
    def is_completed(self) -> bool:
        """A stage counts as done once both a name and a date are recorded."""
        return bool((self.name or "").strip() and (self.date or "").strip())

    def to_dict(self) -> dict:
        result = {f: getattr(self, f) for f in SIGNOFF_FIELDS}
        result["completed"] = self.is_completed
        return result


# ── Flange ───────────────────────────────────────────────────────────────────


class Flange(db.Model):
    """A physical bolted joint tracked through tightening and QC sign-off.

    Business rules:
    - workpack_id is always set; it may be reassigned but never cleared.
    - status is one of FlangeStatus; new rows start at ``pending``.
    - roundpass / finalpass summarise pass1..pass3 (see signoff_workflow).
    - Rows are hard-deleted only through an explicit delete.
    """

    __tablename__ = "flanges"

    id = db.Column(db.Integer, primary_key=True)
    workpack_id = db.Column(
        db.Integer,
        nullable=False,
        index=True,
        comment="workpacks.id (not enforced; a deleted workpack leaves orphans)",
    )

    # ── Identification ──
    flange_id = db.Column(db.String(100), nullable=True, comment="External joint tag / number")
    tag = db.Column(db.String(100), nullable=True)
    isometric = db.Column(db.String(255), nullable=True)
    pid = db.Column(db.String(255), nullable=True, comment="P&ID reference")
    system = db.Column(db.String(255), nullable=True)
    facility = db.Column(db.String(255), nullable=True)
    workpack_name = db.Column(db.String(255), nullable=True, comment="Free-text label from the details form")

    # ── Joint specification ──
    rating = db.Column(db.String(50), nullable=True)
    type = db.Column(db.String(100), nullable=True)
    gasket = db.Column(db.String(255), nullable=True)
    material = db.Column(db.String(255), nullable=True)
    size = db.Column(db.String(50), nullable=True)
    bolt_size = db.Column(db.String(50), nullable=True)
    stud_spec = db.Column(db.String(255), nullable=True)
    nut_spec = db.Column(db.String(255), nullable=True)
    nut_size = db.Column(db.String(50), nullable=True)
    washer = db.Column(db.String(255), nullable=True)
    lubricant = db.Column(db.String(255), nullable=True)
    k_factor = db.Column(db.String(50), nullable=True)
    yield_strength = db.Column(db.String(50), nullable=True)
    torque = db.Column(db.String(50), nullable=True)

    # ── Tooling ──
    torque_or_tension = db.Column(db.String(50), nullable=True, comment="torque | tension")
    equipment_manufacturer = db.Column(db.String(255), nullable=True)
    equipment_quantity = db.Column(db.String(50), nullable=True)
    wrench_size = db.Column(db.String(50), nullable=True)
    toolcerts = db.Column(db.String(500), nullable=True, comment="Reference to the uploaded tool certificate")

    # ── Workflow ──
    status = db.Column(db.String(20), nullable=True, default=FlangeStatus.PENDING.value)
    comments = db.Column(db.Text, nullable=True)
    pass1 = db.Column(db.String(50), nullable=True)
    pass2 = db.Column(db.String(50), nullable=True)
    pass3 = db.Column(db.String(50), nullable=True)
    roundpass = db.Column(db.String(50), nullable=True)
    finalpass = db.Column(db.String(50), nullable=True)

    # ── Sign-off slots ──
    breakout_name = db.Column(db.String(200), nullable=True)
    breakout_signature = db.Column(db.Text, nullable=True)
    breakout_date = db.Column(db.String(50), nullable=True)
    breakout_company = db.Column(db.String(200), nullable=True)
    breakout_notes = db.Column(db.Text, nullable=True)

    assembled_name = db.Column(db.String(200), nullable=True)
    assembled_signature = db.Column(db.Text, nullable=True)
    assembled_date = db.Column(db.String(50), nullable=True)
    assembled_company = db.Column(db.String(200), nullable=True)
    assembled_notes = db.Column(db.Text, nullable=True)

    tightened_name = db.Column(db.String(200), nullable=True)
    tightened_signature = db.Column(db.Text, nullable=True)
    tightened_date = db.Column(db.String(50), nullable=True)
    tightened_company = db.Column(db.String(200), nullable=True)
    tightened_notes = db.Column(db.Text, nullable=True)

    qc_name = db.Column(db.String(200), nullable=True)
    qc_signature = db.Column(db.Text, nullable=True)
    qc_date = db.Column(db.String(50), nullable=True)
    qc_company = db.Column(db.String(200), nullable=True)
    qc_notes = db.Column(db.Text, nullable=True)

    client_name = db.Column(db.String(200), nullable=True)
    client_signature = db.Column(db.Text, nullable=True)
    client_date = db.Column(db.String(50), nullable=True)
    client_company = db.Column(db.String(200), nullable=True)
    client_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Read-only link; resolves to None once the workpack has been deleted
    workpack = db.relationship(
        "Workpack",
        primaryjoin="foreign(Flange.workpack_id) == Workpack.id",
        viewonly=True,
        lazy="joined",
    )

    # ── Sign-off helpers ──

    @property
    def current_status(self) -> str:
        """Status with legacy empty values read as ``pending``."""
        return self.status or FlangeStatus.PENDING.value

    def get_signoff(self, stage: str) -> SignoffEntry:
        if stage not in SIGNOFF_STAGES:
            raise KeyError(stage)
        return SignoffEntry(**{f: getattr(self, f"{stage}_{f}") for f in SIGNOFF_FIELDS})

    def set_signoff(self, stage: str, entry: SignoffEntry) -> None:
        """Overwrite every field of a stage slot (unset fields are cleared)."""
        if stage not in SIGNOFF_STAGES:
            raise KeyError(stage)
        for f in SIGNOFF_FIELDS:
            setattr(self, f"{stage}_{f}", getattr(entry, f))

    def to_dict(self, include_signoffs=True):
        result = {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in ("created_at", "updated_at")
        }
        result["status"] = self.current_status
        result["workpack_label"] = self.workpack.name if self.workpack else None
        result["created_at"] = self.created_at.isoformat() if self.created_at else None
        result["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        if include_signoffs:
            result["signoffs"] = {
                stage: self.get_signoff(stage).to_dict() for stage in SIGNOFF_STAGES
            }
        return result

    def __repr__(self):
        return f"<Flange {self.id}: {self.tag or self.flange_id} [{self.current_status}]>"
