# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for study sessions and their perspective columns.
"""

from flask import jsonify, request

from validators import (
    AddPerspectiveSchema,
    AskRequestSchema,
    ColumnInputSchema,
    ExplainRequestSchema,
    load_request,
)


def register_session_endpoints(app, service):
    """Register session endpoints with Flask app."""

    @app.post("/api/sessions")
    def create_session():
        """Explain a screenshot and open a session on it."""
        data = load_request(ExplainRequestSchema(), request.get_json(silent=True))
        return jsonify(service.start(data["imageDataUrl"], data["instruction"])), 201

    @app.delete("/api/sessions")
    def end_all_sessions():
        return jsonify(status="ended", count=service.end_all())

    @app.get("/api/sessions/<session_id>")
    def get_session(session_id: str):
        return jsonify(service.get(session_id))

    @app.delete("/api/sessions/<session_id>")
    def end_session(session_id: str):
        service.end(session_id)
        return jsonify(status="ended")

    @app.post("/api/sessions/<session_id>/columns")
    def add_column(session_id: str):
        data = load_request(AddPerspectiveSchema(), request.get_json(silent=True))
        return jsonify(service.add_perspective(session_id, data["title"], data["instruction"])), 201

    @app.delete("/api/sessions/<session_id>/columns/<column_id>")
    def remove_column(session_id: str, column_id: str):
        service.remove_column(session_id, column_id)
        return jsonify(status="removed")

    @app.put("/api/sessions/<session_id>/columns/<column_id>/input")
    def set_column_input(session_id: str, column_id: str):
        data = load_request(ColumnInputSchema(), request.get_json(silent=True))
        return jsonify(service.set_input(session_id, column_id, data["value"]))

    @app.post("/api/sessions/<session_id>/columns/<column_id>/ask")
    def ask_in_column(session_id: str, column_id: str):
        """Body: {text} for a question, {action} for a quick action, {} to send the draft."""
        data = load_request(AskRequestSchema(), request.get_json(silent=True))
        if data["action"]:
            return jsonify(service.quick_action(session_id, column_id, data["action"]))
        return jsonify(service.ask(session_id, column_id, data["text"]))

    @app.post("/api/sessions/<session_id>/followups/<int:index>")
    def ask_followup(session_id: str, index: int):
        return jsonify(service.ask_followup(session_id, index))
