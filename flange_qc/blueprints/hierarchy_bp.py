"""
Hierarchy Blueprint: Customer / Asset / Project / Workpack.

Endpoints:
    GET    /api/customers                      list all customers
    POST   /api/customers                      { name }
    GET    /api/customers/<id>
    DELETE /api/customers/<id>

    GET    /api/assets?customerId=<id>         [] when the filter is missing
    POST   /api/assets                         { name, customerId }
    GET    /api/assets/<id>
    DELETE /api/assets/<id>

    GET    /api/projects?assetId=<id>
    POST   /api/projects                       { name, assetId }
    GET    /api/projects/<id>
    DELETE /api/projects/<id>

    GET    /api/workpacks?projectId=<id>
    POST   /api/workpacks                      { name, projectId }
    GET    /api/workpacks/<id>
    DELETE /api/workpacks/<id>

Deletes never cascade; children of a deleted node remain in place.
"""

import logging

from flask import Blueprint, jsonify, request

from flange_qc.services import hierarchy_service
from flange_qc.utils.helpers import body_int, normalize_payload, query_int

logger = logging.getLogger(__name__)

hierarchy_bp = Blueprint("hierarchy", __name__, url_prefix="/api")


def _body() -> dict:
    return normalize_payload(request.get_json(silent=True))


# ── Customers ──────────────────────────────────────────────────────────────────


@hierarchy_bp.route("/customers", methods=["GET"])
def list_customers():
    return jsonify([c.to_dict() for c in hierarchy_service.list_customers()])


@hierarchy_bp.route("/customers", methods=["POST"])
def create_customer():
    data = _body()
    customer = hierarchy_service.create_customer(data.get("name"))
    return jsonify(customer.to_dict()), 201


@hierarchy_bp.route("/customers/<int:customer_id>", methods=["GET"])
def get_customer(customer_id):
    return jsonify(hierarchy_service.get_customer(customer_id).to_dict())


@hierarchy_bp.route("/customers/<int:customer_id>", methods=["DELETE"])
def delete_customer(customer_id):
    hierarchy_service.delete_customer(customer_id)
    return jsonify({"message": "Customer deleted."})


# ── Assets ─────────────────────────────────────────────────────────────────────


@hierarchy_bp.route("/assets", methods=["GET"])
def list_assets():
    customer_id = query_int("customerId", "customer_id")
    return jsonify([a.to_dict() for a in hierarchy_service.list_assets(customer_id)])


@hierarchy_bp.route("/assets", methods=["POST"])
def create_asset():
    data = _body()
    asset = hierarchy_service.create_asset(body_int(data, "customer_id"), data.get("name"))
    return jsonify(asset.to_dict()), 201


@hierarchy_bp.route("/assets/<int:asset_id>", methods=["GET"])
def get_asset(asset_id):
    return jsonify(hierarchy_service.get_asset(asset_id).to_dict())


@hierarchy_bp.route("/assets/<int:asset_id>", methods=["DELETE"])
def delete_asset(asset_id):
    hierarchy_service.delete_asset(asset_id)
    return jsonify({"message": "Asset deleted."})


# ── Projects ───────────────────────────────────────────────────────────────────


@hierarchy_bp.route("/projects", methods=["GET"])
def list_projects():
    asset_id = query_int("assetId", "asset_id")
    return jsonify([p.to_dict() for p in hierarchy_service.list_projects(asset_id)])


@hierarchy_bp.route("/projects", methods=["POST"])
def create_project():
    data = _body()
    project = hierarchy_service.create_project(body_int(data, "asset_id"), data.get("name"))
    return jsonify(project.to_dict()), 201


@hierarchy_bp.route("/projects/<int:project_id>", methods=["GET"])
def get_project(project_id):
    return jsonify(hierarchy_service.get_project(project_id).to_dict())


@hierarchy_bp.route("/projects/<int:project_id>", methods=["DELETE"])
def delete_project(project_id):
    hierarchy_service.delete_project(project_id)
    return jsonify({"message": "Project deleted."})


# ── Workpacks ──────────────────────────────────────────────────────────────────


@hierarchy_bp.route("/workpacks", methods=["GET"])
def list_workpacks():
    project_id = query_int("projectId", "project_id")
    return jsonify([w.to_dict() for w in hierarchy_service.list_workpacks(project_id)])


@hierarchy_bp.route("/workpacks", methods=["POST"])
def create_workpack():
    data = _body()
    workpack = hierarchy_service.create_workpack(body_int(data, "project_id"), data.get("name"))
    return jsonify(workpack.to_dict()), 201


@hierarchy_bp.route("/workpacks/<int:workpack_id>", methods=["GET"])
def get_workpack(workpack_id):
    return jsonify(hierarchy_service.get_workpack(workpack_id).to_dict())


@hierarchy_bp.route("/workpacks/<int:workpack_id>", methods=["DELETE"])
def delete_workpack(workpack_id):
    hierarchy_service.delete_workpack(workpack_id)
    return jsonify({"message": "Work pack deleted."})
