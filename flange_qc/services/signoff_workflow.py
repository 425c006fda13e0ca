"""
Flange sign-off workflow: validated stage transitions and torque passes.

Stage order (FLANGE_TRANSITIONS in flange_qc.models.flange):

    pending -> breakout -> assembled -> tightened -> qc -> client -> complete

Operations:
  - advance:            validated move to the next stage (or re-submission of
                        the current one), writing that stage's SignoffEntry
  - update_status:      administrative override, no ordering check
  - record_pass:        store a torque pass and derive ``roundpass``
  - record_final_pass:  store the final verification once the round is done

Usage:
    from flange_qc.services import signoff_workflow

    flange = signoff_workflow.advance(
        flange_id=12,
        target_stage="breakout",
        entry={"name": "J. Doe", "date": "2026-10-01", "company": "IOS"},
    )
"""

from __future__ import annotations

import logging

from flange_qc.core.exceptions import InvalidTransitionError, ValidationError
from flange_qc.models.flange import (
    PASS_NUMBERS,
    ROUNDPASS_COMPLETE,
    SIGNOFF_STAGES,
    VALID_STATUSES,
    Flange,
    FlangeStatus,
    SignoffEntry,
    validate_stage_transition,
)
from flange_qc.services.flange_service import get_flange
from flange_qc.utils.helpers import as_text, commit_or_raise

logger = logging.getLogger(__name__)


def advance(flange_id: int, target_stage: str, entry: SignoffEntry | dict | None) -> Flange:
    """
    Record a sign-off and move the flange to ``target_stage``.

    Args:
        flange_id: Flange primary key.
        target_stage: One of SIGNOFF_STAGES.
        entry: The stage's SignoffEntry (or a dict of its fields). It replaces
               the stored slot entirely.

    Rules:
        - target_stage must be the immediate successor of the current status,
          or equal to it (re-submission overwrites the entry, status unchanged).
        - A non-empty ``client`` entry moves the flange to ``complete``.
        - A complete flange may re-submit the client entry to correct it; it
          stays complete even when the corrected entry is blank.

    Returns:
        The updated Flange.

    Raises:
        ValidationError: target_stage is not a sign-off stage.
        InvalidTransitionError: the move would skip or go back a stage.
        NotFoundError: no such flange.
    """
    if target_stage not in SIGNOFF_STAGES:
        raise ValidationError(
            f"Unknown sign-off stage '{target_stage}'",
            details={"stage": target_stage, "valid_stages": list(SIGNOFF_STAGES)},
        )

    flange = get_flange(flange_id)
    current = flange.current_status

    if not validate_stage_transition(current, target_stage):
        raise InvalidTransitionError("Flange", flange.id, current, target_stage)

    if not isinstance(entry, SignoffEntry):
        entry = SignoffEntry.from_dict(entry)

    flange.set_signoff(target_stage, entry)
    if current == FlangeStatus.COMPLETE.value:
        new_status = current
    elif target_stage == FlangeStatus.CLIENT.value and not entry.is_empty():
        new_status = FlangeStatus.COMPLETE.value
    else:
        new_status = target_stage
    flange.status = new_status

    commit_or_raise("advance flange")
    if current == new_status:
        logger.info("Flange %s %s sign-off re-submitted", flange.id, target_stage)
    else:
        logger.info("Flange %s advanced %s -> %s", flange.id, current, new_status)
    return flange


def update_status(flange_id: int, status: str) -> Flange:
    """Administrative status override.

    Bypasses stage ordering entirely; only the status value itself is checked
    against the known set. Logged at WARNING so overrides stand out.

    Raises:
        ValidationError: unknown status.
        NotFoundError: no such flange.
    """
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise ValidationError(
            f"Unknown status '{status}'",
            details={"status": status, "valid_statuses": sorted(VALID_STATUSES)},
        )

    flange = get_flange(flange_id)
    previous = flange.current_status
    flange.status = status
    commit_or_raise("update flange status")
    logger.warning("Flange %s status overridden %s -> %s", flange.id, previous, status)
    return flange


def _round_complete(flange: Flange, required_passes: int) -> bool:
    return all(
        (getattr(flange, f"pass{n}") or "").strip()
        for n in range(1, required_passes + 1)
    )


def record_pass(flange_id: int, pass_number: int, value, required_passes: int = 3) -> Flange:
    """Store one torque pass value and derive ``roundpass``.

    ``roundpass`` becomes ``"complete"`` once passes 1..required_passes all
    hold a value. It is never cleared here; manual edits through the details
    update remain possible.

    Raises:
        ValidationError: pass_number outside 1-3, required_passes outside
                         1-3, or a blank value.
        NotFoundError: no such flange.
    """
    if pass_number not in PASS_NUMBERS:
        raise ValidationError(
            f"pass_number must be one of {list(PASS_NUMBERS)}",
            details={"pass_number": pass_number},
        )
    if required_passes not in PASS_NUMBERS:
        raise ValidationError(
            f"required_passes must be one of {list(PASS_NUMBERS)}",
            details={"required_passes": required_passes},
        )
    text = (as_text(value) or "").strip()
    if not text:
        raise ValidationError("value is required", details={"value": "blank"})

    flange = get_flange(flange_id)
    setattr(flange, f"pass{pass_number}", text)
    if _round_complete(flange, required_passes):
        flange.roundpass = ROUNDPASS_COMPLETE

    commit_or_raise("record torque pass")
    logger.info(
        "Flange %s pass%s recorded roundpass=%s",
        flange.id, pass_number, flange.roundpass or "-",
    )
    return flange


def record_final_pass(flange_id: int, value) -> Flange:
    """Store the final verification pass.

    Raises:
        ValidationError: blank value.
        InvalidTransitionError: the round of passes is not yet complete.
        NotFoundError: no such flange.
    """
    text = (as_text(value) or "").strip()
    if not text:
        raise ValidationError("value is required", details={"value": "blank"})

    flange = get_flange(flange_id)
    if (flange.roundpass or "").strip().lower() != ROUNDPASS_COMPLETE:
        raise InvalidTransitionError(
            "Flange", flange.id, "roundpass pending", "finalpass",
            reason="all round passes must be recorded first",
        )

    flange.finalpass = text
    commit_or_raise("record final pass")
    logger.info("Flange %s final pass recorded", flange.id)
    return flange
