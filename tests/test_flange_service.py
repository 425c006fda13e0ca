"""
Service-level tests for the flange repository.

Covers:
    - create / get round-trip with verbatim text attributes
    - patch semantics of both update surfaces
    - workpack reassignment checks
    - listing joins and orphan visibility
    - per-status summary
"""

import pytest

from flange_qc.core.exceptions import NotFoundError, ValidationError
from flange_qc.models.flange import FlangeStatus
from flange_qc.services import flange_service as svc
from flange_qc.services import hierarchy_service


class TestCreateAndGet:
    def test_round_trip_keeps_attributes(self, workpack):
        created = svc.create_flange(workpack.id, {"tag": "F-101", "size": '3/4"', "rating": "150#"})
        flange = svc.get_flange(created.id)
        assert flange.tag == "F-101"
        assert flange.size == '3/4"'
        assert flange.rating == "150#"
        assert flange.workpack_id == workpack.id

    def test_new_flange_defaults(self, workpack):
        flange = svc.create_flange(workpack.id, {})
        assert flange.status == FlangeStatus.PENDING.value
        assert flange.flange_id is None and flange.tag is None
        signoffs = flange.to_dict()["signoffs"]
        assert all(not s["completed"] and s["name"] is None for s in signoffs.values())

    def test_numbers_are_stored_as_text(self, workpack):
        flange = svc.create_flange(workpack.id, {"torque": 450, "k_factor": 0.2})
        assert flange.torque == "450"
        assert flange.k_factor == "0.2"

    def test_unknown_keys_ignored(self, workpack):
        flange = svc.create_flange(workpack.id, {"tag": "F-1", "colour": "red", "id": 999})
        assert flange.id != 999

    def test_missing_workpack(self):
        with pytest.raises(NotFoundError):
            svc.create_flange(42, {"tag": "F-1"})

    @pytest.mark.parametrize("workpack_id", [None, "abc"])
    def test_invalid_workpack_id(self, workpack_id):
        with pytest.raises(ValidationError):
            svc.create_flange(workpack_id, {})

    def test_unknown_status_rejected(self, workpack):
        with pytest.raises(ValidationError):
            svc.create_flange(workpack.id, {"status": "approved"})

    @pytest.mark.parametrize("status", [{"a": 1}, ["qc"]])
    def test_non_string_status_rejected(self, workpack, status):
        with pytest.raises(ValidationError):
            svc.create_flange(workpack.id, {"status": status})

    def test_get_unknown(self):
        with pytest.raises(NotFoundError):
            svc.get_flange(12345)


class TestUpdates:
    def test_patch_only_touches_present_keys(self, make_flange):
        flange = make_flange(tag="F-1", size="2", comments="keep me")
        svc.update_flange(flange.id, {"size": "4"})
        assert (flange.tag, flange.size, flange.comments) == ("F-1", "4", "keep me")

    def test_null_clears_column(self, make_flange):
        flange = make_flange(comments="leaking")
        svc.update_flange(flange.id, {"comments": None})
        assert flange.comments is None

    def test_general_surface_ignores_detail_fields(self, make_flange):
        flange = make_flange()
        svc.update_flange(flange.id, {"pass1": "450", "qc_name": "Q"})
        assert flange.pass1 is None and flange.qc_name is None

    def test_details_surface_writes_signoff_columns(self, make_flange):
        flange = make_flange()
        svc.update_flange_details(flange.id, {"qc_name": "Q. Inspector", "pass2": "300", "lubricant": "Copaslip"})
        assert flange.get_signoff("qc").name == "Q. Inspector"
        assert flange.pass2 == "300"
        assert flange.lubricant == "Copaslip"

    def test_details_surface_skips_ordering_checks(self, make_flange):
        flange = make_flange(status="pending")
        svc.update_flange_details(flange.id, {"status": "complete"})
        assert flange.status == "complete"

    def test_reassign_workpack(self, project, make_flange):
        other = hierarchy_service.create_workpack(project.id, "WP-2")
        flange = make_flange()
        svc.update_flange(flange.id, {"workpack_id": other.id})
        assert flange.workpack_id == other.id

    def test_reassign_to_missing_workpack_leaves_row_unchanged(self, workpack, make_flange):
        flange = make_flange(tag="F-1")
        with pytest.raises(NotFoundError):
            svc.update_flange(flange.id, {"tag": "F-9", "workpack_id": 999})
        refreshed = svc.get_flange(flange.id)
        assert refreshed.tag == "F-1"
        assert refreshed.workpack_id == workpack.id

    def test_workpack_cannot_be_cleared(self, make_flange):
        flange = make_flange()
        with pytest.raises(ValidationError):
            svc.update_flange(flange.id, {"workpack_id": None})

    def test_update_unknown_flange(self):
        with pytest.raises(NotFoundError):
            svc.update_flange(77, {"tag": "x"})

    def test_set_toolcert_path(self, make_flange):
        flange = make_flange()
        svc.set_toolcert_path(flange.id, "/uploads/toolcert-1.pdf")
        assert svc.get_flange(flange.id).toolcerts == "/uploads/toolcert-1.pdf"


class TestListings:
    def test_list_by_workpack_is_exact(self, project, make_flange):
        other = hierarchy_service.create_workpack(project.id, "WP-2")
        mine = [make_flange(tag="A"), make_flange(tag="B")]
        make_flange(tag="C", workpack_id=other.id)
        assert [f.id for f in svc.list_by_workpack(mine[0].workpack_id)] == [f.id for f in mine]

    def test_list_by_project(self, asset, project, workpack, make_flange):
        other_project = hierarchy_service.create_project(asset.id, "Other")
        other_wp = hierarchy_service.create_workpack(other_project.id, "WP-X")
        keep = make_flange(tag="A")
        make_flange(tag="B", workpack_id=other_wp.id)
        assert [f.id for f in svc.list_by_project(project.id)] == [keep.id]

    def test_deleted_workpack_orphans_flanges(self, workpack, make_flange):
        workpack_id = workpack.id
        flange = make_flange()
        hierarchy_service.delete_workpack(workpack_id)

        assert svc.list_by_workpack(workpack_id) == []
        orphans = svc.list_all()
        assert [f.id for f in orphans] == [flange.id]
        assert orphans[0].to_dict()["workpack_label"] is None
        assert svc.get_flange(flange.id).workpack_id == workpack_id

    def test_workpack_label_in_listing(self, workpack, make_flange):
        make_flange()
        assert svc.list_by_workpack(workpack.id)[0].to_dict()["workpack_label"] == workpack.name

    def test_delete(self, make_flange):
        flange_id = make_flange().id
        svc.delete_flange(flange_id)
        with pytest.raises(NotFoundError):
            svc.get_flange(flange_id)
        with pytest.raises(NotFoundError):
            svc.delete_flange(flange_id)


class TestStatusSummary:
    def test_counts_per_status(self, workpack, make_flange):
        make_flange(status="pending")
        make_flange(status="qc")
        make_flange(status="qc")
        make_flange(status=None)

        summary = svc.status_summary(workpack.id)
        assert summary["total"] == 4
        assert summary["by_status"]["pending"] == 2
        assert summary["by_status"]["qc"] == 2
        assert summary["by_status"]["complete"] == 0

    def test_empty_workpack(self):
        summary = svc.status_summary(999)
        assert summary["total"] == 0
        assert set(summary["by_status"]) == {s.value for s in FlangeStatus}
