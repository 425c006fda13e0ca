"""Tool-certification file storage.

Uploaded certificates are written once under the upload folder with a
generated name and never overwritten. Callers store the returned
``/uploads/<filename>`` reference on the flange.
"""

import logging
import os
import time
import uuid

from werkzeug.utils import secure_filename

from flange_qc.core.exceptions import StorageError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"


def resolve_upload_dir(app) -> str:
    """Absolute upload folder; relative UPLOAD_FOLDER values sit under the instance path."""
    folder = app.config.get("UPLOAD_FOLDER") or "uploads"
    if not os.path.isabs(folder):
        folder = os.path.join(app.instance_path, folder)
    return folder


def _generate_name(original: str | None) -> str:
    _, ext = os.path.splitext(secure_filename(original or ""))
    return f"toolcert-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext.lower()}"


def save_toolcert(file, upload_dir: str) -> str:
    """Write an uploaded file and return its public reference.

    Args:
        file: werkzeug FileStorage from ``request.files``.
        upload_dir: Target directory, created if missing.

    Returns:
        ``/uploads/<generated filename>``

    Raises:
        StorageError: the file could not be written.
    """
    try:
        os.makedirs(upload_dir, exist_ok=True)
        while True:
            filename = _generate_name(file.filename)
            path = os.path.join(upload_dir, filename)
            try:
                # "x" mode refuses to replace an existing certificate
                with open(path, "xb") as fh:
                    file.save(fh)
                break
            except FileExistsError:
                continue
    except OSError as exc:
        logger.exception("Could not store toolcert in %s", upload_dir)
        raise StorageError("save toolcert", exc) from exc

    logger.info("Toolcert stored %s (%s)", filename, file.filename)
    return f"{URL_PREFIX}/{filename}"
