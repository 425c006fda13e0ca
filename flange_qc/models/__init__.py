"""
Flange QC Tracker
SQLAlchemy extension instance shared by all models.

Model modules are imported by ``create_app`` so that ``db.create_all()``
and Alembic see every table.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
