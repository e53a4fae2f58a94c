"""
LLM client wrapper with retries, timeouts and JSON-schema constrained output.
"""
import logging
import time
from typing import Any, Dict, List, Optional, Union

from openai import OpenAI, OpenAIError

from .config import config
from .errors import ConfigurationError, LLMServiceError

logger = logging.getLogger(__name__)


class LLMClient:
    """Client for the OpenAI Responses API returning schema-constrained JSON text."""

    def __init__(self, model: str = None, timeout: int = None, max_retries: int = None,
                 api_key: str = None, client: Any = None):
        self.model = model or config.openai_model
        self.timeout = timeout or config.ai_timeout
        self.max_retries = max_retries or config.ai_max_retries
        self.api_key = api_key or config.openai_api_key
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("OPENAI_API_KEY not set")
            # The SDK retries internally too; keep backoff in one place.
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def create_structured(self, input: Union[str, List[Dict[str, Any]]], schema_name: str,
                          schema: Dict[str, Any], instructions: Optional[str] = None) -> Dict[str, Any]:
        """
        Call the model with retry logic.
        Returns: {"text": str, "tokens": int}
        """
        request = {
            "model": self.model,
            "input": input,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "schema": schema,
                }
            },
        }
        if instructions:
            request["instructions"] = instructions

        client = self.client
        for attempt in range(self.max_retries):
            try:
                response = client.responses.create(**request)
                usage = getattr(response, "usage", None)
                tokens = getattr(usage, "total_tokens", 0) if usage is not None else 0
                logger.debug("%s call succeeded on attempt %d (%s tokens)", schema_name, attempt + 1, tokens)
                return {"text": response.output_text, "tokens": tokens or 0}
            except OpenAIError as e:
                logger.warning("%s call failed (attempt %d/%d): %s", schema_name, attempt + 1, self.max_retries, e)
                if attempt == self.max_retries - 1:
                    raise LLMServiceError(f"LLM call failed after {self.max_retries} attempts: {e}") from e
                time.sleep(2 ** attempt)  # Exponential backoff

        raise LLMServiceError("LLM call failed")
