"""
Response normalization for Explain outputs.
"""
from typing import Any, Dict

from common.structured import parse_llm_response
from .models import ScreenAssistResult


def normalize_explain_result(llm_response: str) -> Dict[str, Any]:
    """
    Validate model output against the ScreenAssistResponse schema.
    Returns: {category, confidence, summary, followups}
    """
    result = parse_llm_response(llm_response, ScreenAssistResult)
    return result.model_dump()
