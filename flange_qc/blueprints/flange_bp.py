"""
Flange Blueprint: flange records, sign-off workflow and torque passes.

Endpoints:
    POST   /api/flanges                        create under { workpackId, ... }
    GET    /api/flanges?workpackId=<id>        400 when workpackId is missing
    GET    /api/flanges/by-project?projectId=  400 when projectId is missing
    GET    /api/flanges/all                    includes orphaned flanges
    GET    /api/flanges/summary?workpackId=    per-status counts
    GET    /api/flanges/<id>
    PUT    /api/flanges/<id>                   patch general fields
    PUT    /api/flanges/<id>/details           patch QA / pass / sign-off fields
    DELETE /api/flanges/<id>

    POST   /api/flanges/<id>/update-status     { status }  administrative override
    POST   /api/flanges/<id>/advance           { stage, entry: {name, signature, date, company, notes} }
    POST   /api/flanges/<id>/passes            { passNumber, value }
    POST   /api/flanges/<id>/final-pass        { value }

Layer contract:
    - Blueprint: normalise keys, pull ids out of the request, call the service.
    - Services raise core exceptions; the app-wide handlers render them.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from flange_qc.services import flange_service, signoff_workflow
from flange_qc.utils.errors import E, api_error
from flange_qc.utils.helpers import body_int, normalize_payload, query_int

logger = logging.getLogger(__name__)

flange_bp = Blueprint("flange", __name__, url_prefix="/api/flanges")


def _body() -> dict:
    return normalize_payload(request.get_json(silent=True))


def _dump(flanges) -> list[dict]:
    return [f.to_dict() for f in flanges]


# ── Reads ──────────────────────────────────────────────────────────────────────


@flange_bp.route("", methods=["GET"])
def list_flanges():
    workpack_id = query_int("workpackId", "workpack_id")
    if workpack_id is None:
        return api_error(E.VALIDATION_REQUIRED, "Missing workpackId in query.")
    return jsonify(_dump(flange_service.list_by_workpack(workpack_id)))


@flange_bp.route("/by-project", methods=["GET"])
def list_flanges_by_project():
    project_id = query_int("projectId", "project_id")
    if project_id is None:
        return api_error(E.VALIDATION_REQUIRED, "Missing projectId in query.")
    return jsonify(_dump(flange_service.list_by_project(project_id)))


@flange_bp.route("/all", methods=["GET"])
def list_all_flanges():
    return jsonify(_dump(flange_service.list_all()))


@flange_bp.route("/summary", methods=["GET"])
def flange_summary():
    workpack_id = query_int("workpackId", "workpack_id")
    if workpack_id is None:
        return api_error(E.VALIDATION_REQUIRED, "Missing workpackId in query.")
    return jsonify(flange_service.status_summary(workpack_id))


@flange_bp.route("/<int:flange_id>", methods=["GET"])
def get_flange(flange_id):
    return jsonify(flange_service.get_flange(flange_id).to_dict())


# ── Writes ─────────────────────────────────────────────────────────────────────


@flange_bp.route("", methods=["POST"])
def create_flange():
    data = _body()
    flange = flange_service.create_flange(data.get("workpack_id"), data)
    return jsonify(flange.to_dict()), 201


@flange_bp.route("/<int:flange_id>", methods=["PUT"])
def update_flange(flange_id):
    flange = flange_service.update_flange(flange_id, _body())
    return jsonify(flange.to_dict())


@flange_bp.route("/<int:flange_id>/details", methods=["PUT"])
def update_flange_details(flange_id):
    flange = flange_service.update_flange_details(flange_id, _body())
    return jsonify(flange.to_dict())


@flange_bp.route("/<int:flange_id>", methods=["DELETE"])
def delete_flange(flange_id):
    flange_service.delete_flange(flange_id)
    return jsonify({"message": "Flange deleted."})


# ── Workflow ───────────────────────────────────────────────────────────────────


@flange_bp.route("/<int:flange_id>/update-status", methods=["POST"])
def update_status(flange_id):
    status = _body().get("status")
    if not status:
        return api_error(E.VALIDATION_REQUIRED, "Field 'status' is required.")
    flange = signoff_workflow.update_status(flange_id, status)
    return jsonify({"message": "Status updated.", "flange": flange.to_dict()})


@flange_bp.route("/<int:flange_id>/advance", methods=["POST"])
def advance(flange_id):
    data = _body()
    stage = data.get("stage")
    if not stage:
        return api_error(E.VALIDATION_REQUIRED, "Field 'stage' is required.")
    entry = data.get("entry")
    if entry is not None and not isinstance(entry, dict):
        return api_error(E.VALIDATION_INVALID, "Field 'entry' must be an object.")
    flange = signoff_workflow.advance(flange_id, stage, normalize_payload(entry))
    return jsonify(flange.to_dict())


@flange_bp.route("/<int:flange_id>/passes", methods=["POST"])
def record_pass(flange_id):
    data = _body()
    flange = signoff_workflow.record_pass(
        flange_id,
        body_int(data, "pass_number"),
        data.get("value"),
        required_passes=current_app.config.get("REQUIRED_TORQUE_PASSES", 3),
    )
    return jsonify(flange.to_dict())


@flange_bp.route("/<int:flange_id>/final-pass", methods=["POST"])
def record_final_pass(flange_id):
    flange = signoff_workflow.record_final_pass(flange_id, _body().get("value"))
    return jsonify(flange.to_dict())
