"""
Service-level tests for the Customer / Asset / Project / Workpack hierarchy.

Covers:
    - customer name uniqueness and blank-name rejection
    - parent existence checks on create
    - listings scoped by parent, [] for missing or unknown parents
    - deletes that never cascade
"""

import pytest

from flange_qc.core.exceptions import ConflictError, NotFoundError, ValidationError
from flange_qc.models.hierarchy import Asset, Workpack
from flange_qc.services import hierarchy_service as svc


class TestCustomers:
    def test_create_and_list(self):
        a = svc.create_customer("Acme")
        b = svc.create_customer("Borealis")
        assert [c.name for c in svc.list_customers()] == ["Acme", "Borealis"]
        assert b.id > a.id

    def test_duplicate_name_rejected(self):
        svc.create_customer("Acme")
        with pytest.raises(ConflictError) as exc:
            svc.create_customer("Acme")
        assert exc.value.field == "name"
        assert len(svc.list_customers()) == 1

    def test_name_is_trimmed_before_uniqueness_check(self):
        svc.create_customer("Acme")
        with pytest.raises(ConflictError):
            svc.create_customer("  Acme ")

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            svc.create_customer(name)

    def test_get_unknown_raises(self):
        with pytest.raises(NotFoundError):
            svc.get_customer(999)

    def test_delete_unknown_raises(self):
        with pytest.raises(NotFoundError):
            svc.delete_customer(999)


class TestChildren:
    def test_create_chain(self):
        c = svc.create_customer("Acme")
        a = svc.create_asset(c.id, "Platform Alpha")
        p = svc.create_project(a.id, "Turnaround")
        w = svc.create_workpack(p.id, "WP-1")
        assert (a.customer_id, p.asset_id, w.project_id) == (c.id, a.id, p.id)
        assert svc.get_workpack(w.id).name == "WP-1"

    def test_create_under_missing_parent_raises(self):
        with pytest.raises(NotFoundError):
            svc.create_asset(42, "Orphan")
        with pytest.raises(NotFoundError):
            svc.create_project(42, "Orphan")
        with pytest.raises(NotFoundError):
            svc.create_workpack(42, "Orphan")

    def test_create_without_parent_raises(self):
        with pytest.raises(NotFoundError):
            svc.create_asset(None, "No parent")

    def test_list_scoped_by_parent(self, customer):
        other = svc.create_customer("Other")
        svc.create_asset(customer.id, "A1")
        svc.create_asset(other.id, "B1")
        svc.create_asset(customer.id, "A2")
        assert [a.name for a in svc.list_assets(customer.id)] == ["A1", "A2"]

    def test_list_with_unknown_or_missing_parent_is_empty(self):
        assert svc.list_assets(999) == []
        assert svc.list_projects(None) == []
        assert svc.list_workpacks(123) == []


class TestDeletesDoNotCascade:
    def test_deleting_customer_keeps_assets(self, session, customer, asset):
        customer_id, asset_id = customer.id, asset.id
        svc.delete_customer(customer_id)
        assert session.get(Asset, asset_id) is not None
        assert svc.list_assets(customer_id)[0].id == asset_id

    def test_deleting_project_keeps_workpacks(self, project, workpack):
        project_id = project.id
        svc.delete_project(project_id)
        assert Workpack.query.count() == 1
        with pytest.raises(NotFoundError):
            svc.get_project(project_id)
