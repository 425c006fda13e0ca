"""Hierarchy service: Customer / Asset / Project / Workpack CRUD.

Rules:
  - Customer names are unique (checked up front, backed by a DB constraint).
  - A child can only be created under an existing parent.
  - Listing by a missing or childless parent returns [] rather than an error.
  - Deletes never cascade: children of a deleted node stay in their tables.
  - db.session.commit() happens only in the service layer.
"""

from __future__ import annotations

import logging

from flange_qc.core.exceptions import ConflictError, NotFoundError, ValidationError
from flange_qc.models import db
from flange_qc.models.hierarchy import Asset, Customer, Project, Workpack
from flange_qc.utils.helpers import commit_or_raise

logger = logging.getLogger(__name__)


# ── Shared helpers ────────────────────────────────────────────────────────────


def _clean_name(name) -> str:
    value = str(name or "").strip()
    if not value:
        raise ValidationError("name is required", details={"name": "blank"})
    return value


def _get_or_raise(model, pk, label: str | None = None):
    label = label or model.__name__
    if pk is None:
        raise NotFoundError(label)
    obj = db.session.get(model, pk)
    if obj is None:
        raise NotFoundError(label, pk)
    return obj


def _create_child(model, parent_model, parent_field: str, parent_id, name):
    """Insert ``model(name=..., <parent_field>=parent_id)`` after checking the parent."""
    clean = _clean_name(name)
    _get_or_raise(parent_model, parent_id)
    node = model(name=clean, **{parent_field: parent_id})
    db.session.add(node)
    commit_or_raise(f"create {model.__tablename__}")
    logger.info("%s created id=%s %s=%s", model.__name__, node.id, parent_field, parent_id)
    return node


def _list_children(model, parent_field: str, parent_id):
    if parent_id is None:
        return []
    return (
        model.query
        .filter(getattr(model, parent_field) == parent_id)
        .order_by(model.id.asc())
        .all()
    )


def _delete(model, pk) -> None:
    node = _get_or_raise(model, pk)
    db.session.delete(node)
    commit_or_raise(f"delete {model.__tablename__}")
    logger.info("%s deleted id=%s", model.__name__, pk)


# ── Customers ─────────────────────────────────────────────────────────────────


def create_customer(name) -> Customer:
    """Create a customer.

    Raises:
        ValidationError: blank name.
        ConflictError: a customer with this name already exists.
    """
    clean = _clean_name(name)
    if Customer.query.filter(Customer.name == clean).first():
        raise ConflictError("Customer", "name", clean)

    customer = Customer(name=clean)
    db.session.add(customer)
    # A concurrent insert of the same name still lands on the unique constraint
    commit_or_raise("create customers", conflict=("Customer", "name", clean))
    logger.info("Customer created id=%s name=%r", customer.id, customer.name)
    return customer


def list_customers() -> list[Customer]:
    return Customer.query.order_by(Customer.id.asc()).all()


def get_customer(customer_id: int) -> Customer:
    return _get_or_raise(Customer, customer_id)


def delete_customer(customer_id: int) -> None:
    _delete(Customer, customer_id)


# ── Assets ────────────────────────────────────────────────────────────────────


def create_asset(customer_id: int, name) -> Asset:
    """Create an asset under an existing customer."""
    return _create_child(Asset, Customer, "customer_id", customer_id, name)


def list_assets(customer_id: int | None) -> list[Asset]:
    return _list_children(Asset, "customer_id", customer_id)


def get_asset(asset_id: int) -> Asset:
    return _get_or_raise(Asset, asset_id)


def delete_asset(asset_id: int) -> None:
    _delete(Asset, asset_id)


# ── Projects ──────────────────────────────────────────────────────────────────


def create_project(asset_id: int, name) -> Project:
    """Create a project under an existing asset."""
    return _create_child(Project, Asset, "asset_id", asset_id, name)


def list_projects(asset_id: int | None) -> list[Project]:
    return _list_children(Project, "asset_id", asset_id)


def get_project(project_id: int) -> Project:
    return _get_or_raise(Project, project_id)


def delete_project(project_id: int) -> None:
    _delete(Project, project_id)


# ── Workpacks ─────────────────────────────────────────────────────────────────


def create_workpack(project_id: int, name) -> Workpack:
    """Create a workpack under an existing project."""
    return _create_child(Workpack, Project, "project_id", project_id, name)


def list_workpacks(project_id: int | None) -> list[Workpack]:
    return _list_children(Workpack, "project_id", project_id)


def get_workpack(workpack_id: int) -> Workpack:
    return _get_or_raise(Workpack, workpack_id)


def delete_workpack(workpack_id: int) -> None:
    """Delete a workpack. Its flanges are kept and become orphans."""
    _delete(Workpack, workpack_id)
