# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for uploaded PDFs and drag-selection captures.
"""

import logging
import os
import uuid

from flask import jsonify, request
from werkzeug.utils import secure_filename

from common.config import config
from common.errors import SelectionError
from validators import CaptureRequestSchema, load_request
from .geometry import Point, normalize_rect, point_in_scroll_container, visible_crop_box

logger = logging.getLogger(__name__)


def allowed_pdf(fileobj):
    """Lenient PDF check: just check extension and MIME type."""
    if not fileobj.filename:
        return False

    ext = fileobj.filename.lower().endswith(".pdf")
    mime = fileobj.mimetype == "application/pdf"

    # Accept if either extension OR MIME type indicates PDF
    return ext or mime


def register_document_endpoints(app, documents, session_service):
    """Register document endpoints with Flask app."""

    @app.post("/api/documents")
    def upload_document():
        """Upload one PDF and get its page layout."""
        f = request.files.get("file")
        if not f or not allowed_pdf(f):
            return jsonify(error="Upload one PDF file"), 400

        filename = secure_filename(f.filename) or "document.pdf"
        path = os.path.join(app.config["UPLOAD_FOLDER"], f"{uuid.uuid4()}_{filename}")
        f.save(path)

        try:
            doc_id = documents.register(path, filename)
        except (RuntimeError, ValueError) as e:
            logger.warning("Could not open %s: %s", filename, e)
            try:
                os.remove(path)
            except OSError:
                pass
            return jsonify(error=f"Could not open PDF: {e}"), 400

        return jsonify(documents.describe(doc_id)), 201

    @app.get("/api/documents/<doc_id>")
    def get_document(doc_id: str):
        return jsonify(documents.describe(doc_id))

    @app.delete("/api/documents/<doc_id>")
    def delete_document(doc_id: str):
        documents.remove(doc_id)
        return jsonify(status="deleted")

    @app.post("/api/documents/<doc_id>/capture")
    def capture_selection(doc_id: str):
        """
        Capture the dragged region of a document.

        Body: {start: {x, y}, end: {x, y}, scroll: {left, top},
               viewport: {width, height}, dpr?, analyze?, instruction?,
               coordinates?, box?}
        By default start/end are container coordinates (already include
        scroll). With coordinates="client" they are pointer positions and
        `box` is the container's top-left in the same client space.
        """
        view = documents.view(doc_id)
        data = load_request(CaptureRequestSchema(), request.get_json(silent=True))

        scroll, viewport = data["scroll"], data["viewport"]
        start, end = Point(**data["start"]), Point(**data["end"])
        if data["coordinates"] == "client":
            box = data["box"]
            start, end = (
                point_in_scroll_container(p.x, p.y, box["left"], box["top"], scroll["left"], scroll["top"])
                for p in (start, end)
            )

        rect = normalize_rect(start, end)
        if not rect.is_selectable(config.min_selection):
            raise SelectionError("Selection is too small")

        image_data_url = view.capture(
            rect, scroll["left"], scroll["top"], viewport["width"], viewport["height"], data["dpr"]
        )
        visible = visible_crop_box(rect, scroll["left"], scroll["top"], viewport["width"], viewport["height"])

        payload = {
            "imageDataUrl": image_data_url,
            "rect": visible.to_dict(),
            "text": view.selected_text(visible),
        }
        if data["analyze"]:
            payload["session"] = session_service.start(image_data_url, data["instruction"] or "")
        return jsonify(payload)
