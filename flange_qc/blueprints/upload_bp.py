"""
Upload Blueprint: tool-certification PDFs.

Endpoints:
    POST /api/upload-toolcert/<flange_id>   multipart, file field "pdf"
    GET  /uploads/<filename>                serve a stored certificate
"""

import logging

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from flange_qc.services import flange_service, toolcert_storage
from flange_qc.utils.errors import E, api_error

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


@upload_bp.route("/api/upload-toolcert/<int:flange_id>", methods=["POST"])
def upload_toolcert(flange_id):
    """Store the file, then link it to the flange.

    Returns 400 without a file part, 404 for an unknown flange (nothing is
    written in either case).
    """
    file = request.files.get("pdf")
    if file is None or not file.filename:
        return api_error(E.VALIDATION_REQUIRED, "No file uploaded.")

    flange_service.get_flange(flange_id)

    upload_dir = toolcert_storage.resolve_upload_dir(current_app)
    file_path = toolcert_storage.save_toolcert(file, upload_dir)
    flange = flange_service.set_toolcert_path(flange_id, file_path)
    return jsonify({"message": "PDF uploaded.", "file_path": file_path, "flange": flange.to_dict()})


@upload_bp.route("/uploads/<path:filename>", methods=["GET"])
def serve_upload(filename):
    return send_from_directory(toolcert_storage.resolve_upload_dir(current_app), filename)
