# SPDX-License-Identifier: AGPL-3.0-only

"""
Pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import json
import os
import tempfile

# Settings are read at import time; keep uploads and keys out of the real environment.
os.environ.setdefault("CONTEXTFLOW_UPLOAD_FOLDER", tempfile.mkdtemp(prefix="contextflow-tests-"))
os.environ.setdefault("CONTEXTFLOW_CACHE_ENABLED", "false")

import fitz
import pytest
from unittest.mock import Mock

from chat.service import ChatService
from common.caching import SimpleCache
from common.llm_client import LLMClient
from explain.service import ExplainService
from session.service import StudySessionService
from session.store import SessionStore
from viewer.document import DocumentView
from viewer.store import DocumentStore


SAMPLE_DATA_URL = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


def llm_reply(payload, tokens: int = 42):
    """What LLMClient.create_structured returns for a given JSON payload."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"text": text, "tokens": tokens}


@pytest.fixture
def explain_payload():
    """Sample explain result as the model returns it."""
    return {
        "category": "math",
        "confidence": 0.92,
        "summary": "A quadratic equation solved with the quadratic formula.",
        "followups": ["Which root is needed?", "Should the steps be shown?"],
    }


@pytest.fixture
def chat_payload():
    return {"answer": "Step one:\\nfactor the expression.", "followups": []}


@pytest.fixture
def mock_llm_client(explain_payload):
    """Mock LLM client answering with the sample explain payload."""
    client = Mock(spec=LLMClient)
    client.create_structured.return_value = llm_reply(explain_payload)
    return client


@pytest.fixture
def explain_service(mock_llm_client):
    return ExplainService(llm_client=mock_llm_client, cache=SimpleCache(max_size=5), use_cache=False,
                          debug_metrics=False)


@pytest.fixture
def mock_chat_service(chat_payload):
    service = Mock(spec=ChatService)
    service.answer.return_value = dict(chat_payload)
    return service


@pytest.fixture
def mock_explain_service(explain_payload):
    service = Mock(spec=ExplainService)
    service.process.return_value = dict(explain_payload)
    return service


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def session_service(session_store, mock_explain_service, mock_chat_service):
    return StudySessionService(
        store=session_store,
        explain_service=mock_explain_service,
        chat_service=mock_chat_service,
        history_limit=30,
    )


@pytest.fixture
def sample_pdf_bytes():
    """Two 200x100pt pages; the first one carries a line of text."""
    doc = fitz.open()
    page = doc.new_page(width=200, height=100)
    page.insert_text((20, 50), "Hello region", fontsize=12)
    doc.new_page(width=200, height=100)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def document_view(sample_pdf_bytes):
    view = DocumentView(sample_pdf_bytes, scale=1.2, padding=24, gap=16)
    yield view
    view.close()


@pytest.fixture
def document_store():
    return DocumentStore()


@pytest.fixture
def flask_app(mock_explain_service, mock_chat_service, session_store, document_store):
    from app import create_app

    app = create_app(
        explain_service=mock_explain_service,
        chat_service=mock_chat_service,
        session_store=session_store,
        document_store=document_store,
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    # Add markers based on test names
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)  # Default to unit test
