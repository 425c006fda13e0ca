"""Organisational hierarchy: Customer -> Asset -> Project -> Workpack.

Parent references are plain integer columns without a database foreign key.
Parent existence is checked by the service layer at create time; deleting a
parent leaves its children in place (no cascade), so listing queries must
tolerate orphans.
"""

from datetime import datetime, timezone

from flange_qc.models import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(db.Model):
    """Top of the hierarchy. Names are unique across all customers."""

    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Customer {self.id}: {self.name}>"


class Asset(db.Model):
    """Plant or facility owned by a customer."""

    __tablename__ = "assets"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    customer_id = db.Column(
        db.Integer,
        nullable=False,
        index=True,
        comment="customers.id (not enforced; deletes do not cascade)",
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "customer_id": self.customer_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Asset {self.id}: {self.name}>"


class Project(db.Model):
    """Scope of work on one asset."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    asset_id = db.Column(
        db.Integer,
        nullable=False,
        index=True,
        comment="assets.id (not enforced; deletes do not cascade)",
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "asset_id": self.asset_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"


class Workpack(db.Model):
    """Named batch of flange work within a project."""

    __tablename__ = "workpacks"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    project_id = db.Column(
        db.Integer,
        nullable=False,
        index=True,
        comment="projects.id (not enforced; deletes do not cascade)",
    )
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "project_id": self.project_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Workpack {self.id}: {self.name}>"
