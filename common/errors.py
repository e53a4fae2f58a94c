"""
Error types shared by the services. Each carries the HTTP status the API
layer should answer with.
"""
from typing import Any, Dict, Optional


class ContextFlowError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message}
        payload.update(self.details)
        return payload


class ConfigurationError(ContextFlowError):
    """Server is missing required configuration (e.g. API key)."""
    status_code = 500


class LLMServiceError(ContextFlowError):
    """The model API call failed."""
    status_code = 502


class ModelOutputError(ContextFlowError):
    """Model output was not valid JSON or did not match the expected schema."""
    status_code = 502

    def __init__(self, raw: Any, message: str = "Model did not return valid JSON"):
        super().__init__(message, {"raw": raw})
        self.raw = raw


class SelectionError(ContextFlowError):
    """Selection cannot be captured."""
    status_code = 400


class NotFoundError(ContextFlowError):
    status_code = 404
