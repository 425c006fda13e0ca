"""initial_flange_schema

Create the customer/asset/project/workpack hierarchy and the `flanges`
table. Parent ids are plain indexed integers without foreign keys: deleting
a parent never cascades to its children.

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "a1f3c9d2e7b4"
down_revision = None
branch_labels = None
depends_on = None


_SIGNOFF_STAGES = ("breakout", "assembled", "tightened", "qc", "client")


def _signoff_columns():
    cols = []
    for stage in _SIGNOFF_STAGES:
        cols += [
            sa.Column(f"{stage}_name", sa.String(length=200), nullable=True),
            sa.Column(f"{stage}_signature", sa.Text(), nullable=True),
            sa.Column(f"{stage}_date", sa.String(length=50), nullable=True),
            sa.Column(f"{stage}_company", sa.String(length=200), nullable=True),
            sa.Column(f"{stage}_notes", sa.Text(), nullable=True),
        ]
    return cols


def _create_child_table(existing, name, parent_column):
    if name in existing:
        return
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column(parent_column, sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_{parent_column}", name, [parent_column])


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "customers" not in existing_tables:
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("name"),
        )

    _create_child_table(existing_tables, "assets", "customer_id")
    _create_child_table(existing_tables, "projects", "asset_id")
    _create_child_table(existing_tables, "workpacks", "project_id")

    if "flanges" not in existing_tables:
        op.create_table(
            "flanges",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("workpack_id", sa.Integer(), nullable=False),
            sa.Column("flange_id", sa.String(length=100), nullable=True),
            sa.Column("tag", sa.String(length=100), nullable=True),
            sa.Column("isometric", sa.String(length=255), nullable=True),
            sa.Column("pid", sa.String(length=255), nullable=True),
            sa.Column("system", sa.String(length=255), nullable=True),
            sa.Column("facility", sa.String(length=255), nullable=True),
            sa.Column("workpack_name", sa.String(length=255), nullable=True),
            sa.Column("rating", sa.String(length=50), nullable=True),
            sa.Column("type", sa.String(length=100), nullable=True),
            sa.Column("gasket", sa.String(length=255), nullable=True),
            sa.Column("material", sa.String(length=255), nullable=True),
            sa.Column("size", sa.String(length=50), nullable=True),
            sa.Column("bolt_size", sa.String(length=50), nullable=True),
            sa.Column("stud_spec", sa.String(length=255), nullable=True),
            sa.Column("nut_spec", sa.String(length=255), nullable=True),
            sa.Column("nut_size", sa.String(length=50), nullable=True),
            sa.Column("washer", sa.String(length=255), nullable=True),
            sa.Column("lubricant", sa.String(length=255), nullable=True),
            sa.Column("k_factor", sa.String(length=50), nullable=True),
            sa.Column("yield_strength", sa.String(length=50), nullable=True),
            sa.Column("torque", sa.String(length=50), nullable=True),
            sa.Column("torque_or_tension", sa.String(length=50), nullable=True),
            sa.Column("equipment_manufacturer", sa.String(length=255), nullable=True),
            sa.Column("equipment_quantity", sa.String(length=50), nullable=True),
            sa.Column("wrench_size", sa.String(length=50), nullable=True),
            sa.Column("toolcerts", sa.String(length=500), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=True, server_default="pending"),
            sa.Column("comments", sa.Text(), nullable=True),
            sa.Column("pass1", sa.String(length=50), nullable=True),
            sa.Column("pass2", sa.String(length=50), nullable=True),
            sa.Column("pass3", sa.String(length=50), nullable=True),
            sa.Column("roundpass", sa.String(length=50), nullable=True),
            sa.Column("finalpass", sa.String(length=50), nullable=True),
            *_signoff_columns(),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_flanges_workpack_id", "flanges", ["workpack_id"])


def downgrade():
    op.drop_index("ix_flanges_workpack_id", table_name="flanges")
    op.drop_table("flanges")
    for name, parent_column in (
        ("workpacks", "project_id"),
        ("projects", "asset_id"),
        ("assets", "customer_id"),
    ):
        op.drop_index(f"ix_{name}_{parent_column}", table_name=name)
        op.drop_table(name)
    op.drop_table("customers")
