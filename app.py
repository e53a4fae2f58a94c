"""
ContextFlow – pure API back-end

Endpoints
─────────
GET    /health                                   → {"status": "ok"}
POST   /api/explain                              → {category, confidence, summary, followups}
POST   /api/chat                                 → {answer, followups}
POST   /api/documents                            → page layout of an uploaded PDF
POST   /api/documents/<id>/capture               → PNG data URL of a drag selection
POST   /api/sessions                             → explain + open perspective columns
DELETE /api/sessions                             → end every open session
POST   /api/sessions/<id>/columns/<col>/ask      → ask within one perspective
(no HTML rendered; UI lives in the front-end)
"""

# SPDX-License-Identifier: AGPL-3.0-only

# ── imports ──────────────────────────────────────────────────────
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS                 # allow front-end origin
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file before settings are read
load_dotenv()

from chat.service import ChatService
from common.config import config
from common.errors import ContextFlowError
from explain.service import ExplainService
from session.endpoints import register_session_endpoints
from session.service import StudySessionService
from session.store import SessionStore
from validators import ChatRequestSchema, ExplainRequestSchema, load_request
from viewer.endpoints import register_document_endpoints
from viewer.store import DocumentStore, purge_old_files

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(explain_service: ExplainService = None, chat_service: ChatService = None,
               session_store: SessionStore = None, document_store: DocumentStore = None) -> Flask:
    """Build the Flask app; services can be injected (tests) or default to the configured ones."""
    app = Flask(__name__)

    explain_service = explain_service or ExplainService()
    chat_service = chat_service or ChatService()
    session_service = StudySessionService(
        store=session_store if session_store is not None else SessionStore(),
        explain_service=explain_service,
        chat_service=chat_service,
    )
    documents = document_store if document_store is not None else DocumentStore()

    CORS(
        app,
        resources={r"/api/*": {"origins": config.cors_origins}}
    )

    # ── config & housekeeping ───────────────────────────────────────
    app.config["UPLOAD_FOLDER"]      = config.get_effective_upload_folder()
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length    # screenshots are base64
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    removed = purge_old_files(app.config["UPLOAD_FOLDER"], config.purge_after_hours)
    if removed:
        logger.info("Purged %d stale uploads", removed)

    if not config.validate_ai_config():
        logger.warning("OPENAI_API_KEY is not set; model calls will fail")

    # ── error handling ──────────────────────────────────────────────
    @app.errorhandler(ContextFlowError)
    def contextflow_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(413)
    def request_too_large(e):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return jsonify(error=f"Request too large (max {limit_mb} MB)"), 413

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return jsonify(error=e.description), e.code
        logger.exception("Error in %s", request.path)
        return jsonify(error=str(e) or "Internal server error"), 500

    # ── ROUTES ───────────────────────────────────────────────────────
    @app.get("/")
    def root():
        """Simple root for anyone hitting the API directly."""
        return {"service": "ContextFlow API", "docs": "/health"}, 200

    @app.get("/health")
    def health():
        """Used by the front-end (and uptime checks) to verify API is alive."""
        return jsonify(status="ok"), 200

    @app.get("/api/ai-config")
    def ai_config():
        """Debug endpoint to check AI service configuration"""
        return jsonify(config.get_ai_config()), 200

    @app.post("/api/explain")
    def explain():
        """
        Analyze a screenshot and return structured information.

        Body: {imageDataUrl: "data:image/png;base64,...", instruction?: string}
        """
        data = load_request(ExplainRequestSchema(), request.get_json(silent=True))
        return jsonify(explain_service.process(data["imageDataUrl"], data["instruction"]))

    @app.post("/api/chat")
    def chat():
        """
        Continue a conversation about a screenshot.

        Body: {context: string, question: string, history?: [{role, text}]}
        """
        data = load_request(ChatRequestSchema(), request.get_json(silent=True))
        return jsonify(chat_service.answer(data["context"], data["question"], data["history"]))

    register_document_endpoints(app, documents, session_service)
    register_session_endpoints(app, session_service)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=3001, debug=True)
