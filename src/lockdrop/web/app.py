"""
HTTP front end for LockDrop.

Routes:
    GET  /                      -> upload/download page
    POST /upload                -> multipart ``file`` + ``password``; JSON upload result
    POST /download/<file_id>    -> JSON ``{"password": ...}``; the original bytes
    GET  /files                 -> JSON listing of stored blobs
    GET  /health                -> liveness probe

The app owns its configuration and its template environment; nothing is shared
through module globals, so several apps can live in one process (tests do this).
"""

import logging
from pathlib import Path
from typing import Optional

from flask import Flask, Response, current_app, jsonify, render_template, request
from werkzeug.exceptions import RequestEntityTooLarge

from ..config import AppConfig
from ..core.exceptions import (
    AuthenticationFailedError,
    BlobExpiredError,
    BlobNotFoundError,
    FileTooLargeError,
    InvalidBlobIdError,
    InvalidUploadError,
    LockDropError,
    MalformedBlobError,
)
from ..core.service import ShareService, size_limit_message


logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
# Room for multipart boundaries and the password field on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024

# (status, message) per error kind; messages never say which cause applied
ERROR_RESPONSES = [
    (AuthenticationFailedError, 403, "Decryption failed"),
    (MalformedBlobError, 404, "File not found"),
    (BlobNotFoundError, 404, "File not found"),
    (InvalidBlobIdError, 404, "File not found"),
    (BlobExpiredError, 410, "File has expired"),
    (FileTooLargeError, 413, None),
    (InvalidUploadError, 400, None),
]


def _service() -> ShareService:
    return current_app.extensions["lockdrop"]


def _error(status: int, message: str):
    return jsonify({"error": message}), status


def index():
    return render_template("index.html", title="Secure File Sharing System")


def upload_file():
    upload = request.files.get("file")
    data = upload.read() if upload is not None else b""
    password = request.form.get("password")
    result = _service().upload(data, password)
    return jsonify(result.to_dict())


def download_file(file_id: str):
    body = request.get_json(silent=True)
    password = body.get("password") if isinstance(body, dict) else None
    if not isinstance(password, str):
        return _error(400, "No password provided")

    data = _service().download(file_id, password)
    return Response(
        data,
        mimetype="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{file_id}"'},
    )


def list_files():
    if not current_app.config["LOCKDROP"].enable_listing:
        return _error(404, "Not found")
    return jsonify([info.to_dict() for info in _service().list_files()])


def health_check():
    return Response("Server is running", mimetype="text/plain")


def handle_lockdrop_error(exc: LockDropError):
    for kind, status, message in ERROR_RESPONSES:
        if isinstance(exc, kind):
            return _error(status, message or str(exc))
    # CipherConfigurationError, StorageError: internal, keep details in the log
    logger.error("Request failed: %s", exc.__class__.__name__)
    return _error(500, "Internal server error")


def handle_too_large(exc: RequestEntityTooLarge):
    return _error(413, size_limit_message(current_app.config["LOCKDROP"].max_file_size))


def create_app(config: AppConfig, service: Optional[ShareService] = None) -> Flask:
    """Build a Flask app wired to ``service`` (or a new one built from ``config``)."""
    app = Flask(__name__, template_folder=str(TEMPLATE_DIR))
    app.config["LOCKDROP"] = config
    app.config["MAX_CONTENT_LENGTH"] = config.max_file_size + MULTIPART_OVERHEAD
    app.extensions["lockdrop"] = service if service is not None else ShareService(config)

    app.add_url_rule("/", "index", index, methods=["GET"])
    app.add_url_rule("/upload", "upload", upload_file, methods=["POST"])
    app.add_url_rule(
        "/download/<file_id>", "download", download_file, methods=["POST"]
    )
    app.add_url_rule("/files", "files", list_files, methods=["GET"])
    app.add_url_rule("/health", "health", health_check, methods=["GET"])

    app.register_error_handler(LockDropError, handle_lockdrop_error)
    app.register_error_handler(RequestEntityTooLarge, handle_too_large)
    return app
