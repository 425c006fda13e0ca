"""
State-machine tests for the flange sign-off workflow.

Stage order (FLANGE_TRANSITIONS in flange_qc/models/flange.py):

    pending -> breakout -> assembled -> tightened -> qc -> client -> complete

Every stage may be re-submitted; a complete flange may only correct the
client entry. update_status is the unchecked administrative override.
"""

import logging

import pytest

from flange_qc.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from flange_qc.models.flange import FLANGE_TRANSITIONS, SIGNOFF_STAGES, SignoffEntry
from flange_qc.services import signoff_workflow as wf

ENTRY = {"name": "J. Doe", "date": "2026-10-01", "company": "IOS", "signature": "jd"}


def _valid_transitions():
    return [(src, tgt) for src, targets in FLANGE_TRANSITIONS.items() for tgt in targets]


def _invalid_transitions():
    return [
        (src, tgt)
        for src, targets in FLANGE_TRANSITIONS.items()
        for tgt in SIGNOFF_STAGES
        if tgt not in targets
    ]


class TestAdvance:
    @pytest.mark.parametrize("from_status,to_stage", _valid_transitions())
    def test_valid_transitions(self, make_flange, from_status, to_stage):
        flange = make_flange(status=from_status)
        wf.advance(flange.id, to_stage, ENTRY)
        expected = "complete" if to_stage == "client" else to_stage
        assert flange.status == expected
        assert flange.get_signoff(to_stage).name == "J. Doe"

    @pytest.mark.parametrize("from_status,to_stage", _invalid_transitions())
    def test_invalid_transitions(self, make_flange, from_status, to_stage):
        flange = make_flange(status=from_status)
        with pytest.raises(InvalidTransitionError) as exc:
            wf.advance(flange.id, to_stage, ENTRY)
        assert exc.value.details == {"from": from_status, "to": to_stage}
        assert flange.status == from_status

    def test_assembled_from_pending_rejected(self, make_flange):
        flange = make_flange()
        with pytest.raises(InvalidTransitionError):
            wf.advance(flange.id, "assembled", ENTRY)
        assert flange.assembled_name is None

    def test_resubmission_overwrites_entry(self, make_flange):
        flange = make_flange(status="breakout", breakout_name="First", breakout_notes="old")
        wf.advance(flange.id, "breakout", {"name": "Second", "date": "2026-10-02"})
        entry = flange.get_signoff("breakout")
        assert flange.status == "breakout"
        assert entry.name == "Second"
        assert entry.notes is None

    def test_legacy_null_status_counts_as_pending(self, make_flange):
        flange = make_flange(status=None)
        wf.advance(flange.id, "breakout", ENTRY)
        assert flange.status == "breakout"

    def test_empty_client_entry_stays_at_client(self, make_flange):
        flange = make_flange(status="qc")
        wf.advance(flange.id, "client", {"name": "  "})
        assert flange.status == "client"

    def test_complete_can_correct_client_entry(self, make_flange):
        flange = make_flange(status="complete", client_name="Wrong")
        wf.advance(flange.id, "client", SignoffEntry(name="Right", date="2026-10-03"))
        assert flange.status == "complete"
        assert flange.client_name == "Right"

    def test_blank_client_correction_keeps_complete(self, make_flange):
        flange = make_flange(status="complete", client_name="Right", client_date="2026-10-03")
        wf.advance(flange.id, "client", {})
        assert flange.status == "complete"
        assert flange.client_name is None

    def test_unknown_stage(self, make_flange):
        flange = make_flange()
        with pytest.raises(ValidationError) as exc:
            wf.advance(flange.id, "complete", ENTRY)
        assert not isinstance(exc.value, InvalidTransitionError)

    def test_missing_flange(self):
        with pytest.raises(NotFoundError):
            wf.advance(404, "breakout", ENTRY)

    def test_full_walk(self, make_flange):
        flange = make_flange()
        for stage in SIGNOFF_STAGES:
            wf.advance(flange.id, stage, ENTRY)
        assert flange.status == "complete"
        assert all(flange.get_signoff(s).is_completed for s in SIGNOFF_STAGES)


class TestUpdateStatus:
    @pytest.mark.parametrize("start", ["pending", "breakout", "qc", None])
    def test_override_always_allowed(self, make_flange, start):
        flange = make_flange(status=start)
        wf.update_status(flange.id, "complete")
        assert flange.status == "complete"

    def test_backwards_override(self, make_flange):
        flange = make_flange(status="client")
        wf.update_status(flange.id, "pending")
        assert flange.status == "pending"

    def test_override_logged_as_warning(self, make_flange, caplog):
        flange = make_flange(status="qc")
        with caplog.at_level(logging.WARNING, logger="flange_qc.services.signoff_workflow"):
            wf.update_status(flange.id, "breakout")
        assert any(
            r.levelno == logging.WARNING and "qc -> breakout" in r.getMessage()
            for r in caplog.records
        )

    def test_unknown_status(self, make_flange):
        flange = make_flange()
        with pytest.raises(ValidationError):
            wf.update_status(flange.id, "done")

    @pytest.mark.parametrize("status", [{"a": 1}, ["qc"], 3])
    def test_non_string_status(self, make_flange, status):
        flange = make_flange()
        with pytest.raises(ValidationError):
            wf.update_status(flange.id, status)

    def test_missing_flange(self):
        with pytest.raises(NotFoundError):
            wf.update_status(404, "qc")


class TestPasses:
    def test_roundpass_after_all_three(self, make_flange):
        flange = make_flange()
        wf.record_pass(flange.id, 1, "300")
        wf.record_pass(flange.id, 2, "450")
        assert flange.roundpass is None
        wf.record_pass(flange.id, 3, "450")
        assert flange.roundpass == "complete"
        assert (flange.pass1, flange.pass2, flange.pass3) == ("300", "450", "450")

    def test_fewer_required_passes(self, make_flange):
        flange = make_flange()
        wf.record_pass(flange.id, 1, 450, required_passes=1)
        assert flange.pass1 == "450"
        assert flange.roundpass == "complete"

    def test_out_of_order_passes(self, make_flange):
        flange = make_flange()
        wf.record_pass(flange.id, 3, "450")
        wf.record_pass(flange.id, 1, "300")
        assert flange.roundpass is None
        wf.record_pass(flange.id, 2, "450")
        assert flange.roundpass == "complete"

    @pytest.mark.parametrize("pass_number", [0, 4, -1])
    def test_bad_pass_number(self, make_flange, pass_number):
        flange = make_flange()
        with pytest.raises(ValidationError):
            wf.record_pass(flange.id, pass_number, "450")

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_value(self, make_flange, value):
        flange = make_flange()
        with pytest.raises(ValidationError):
            wf.record_pass(flange.id, 1, value)

    def test_bad_required_passes(self, make_flange):
        flange = make_flange()
        with pytest.raises(ValidationError):
            wf.record_pass(flange.id, 1, "450", required_passes=4)

    def test_final_pass_requires_round(self, make_flange):
        flange = make_flange(pass1="300")
        with pytest.raises(InvalidTransitionError):
            wf.record_final_pass(flange.id, "450")
        assert flange.finalpass is None

    def test_final_pass(self, make_flange):
        flange = make_flange(pass1="1", pass2="2", pass3="3", roundpass="complete")
        wf.record_final_pass(flange.id, "460")
        assert flange.finalpass == "460"

    @pytest.mark.parametrize("roundpass", ["no", "pending", "  "])
    def test_final_pass_rejects_unfinished_roundpass(self, make_flange, roundpass):
        flange = make_flange(roundpass=roundpass)
        with pytest.raises(InvalidTransitionError):
            wf.record_final_pass(flange.id, "460")
        assert flange.finalpass is None

    def test_final_pass_after_manual_roundpass(self, make_flange):
        flange = make_flange(roundpass="Complete")
        wf.record_final_pass(flange.id, "460")
        assert flange.finalpass == "460"

    def test_final_pass_blank(self, make_flange):
        flange = make_flange(roundpass="complete")
        with pytest.raises(ValidationError):
            wf.record_final_pass(flange.id, " ")
