"""
Parsing of schema-constrained model output.
"""
import json
import logging
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ModelOutputError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def string_array() -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}}


def object_schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    """Closed JSON schema object as accepted by json_schema text formats."""
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
        "required": required,
    }


def parse_llm_response(text: Any, model: Type[ModelT]) -> ModelT:
    """
    Parse model output text into `model`.
    Raises ModelOutputError carrying the raw text when the output is not JSON
    or does not match the schema.
    """
    if not isinstance(text, str):
        raise ModelOutputError(text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Model output is not JSON: %.200s", text)
        raise ModelOutputError(text)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Model output does not match %s: %s", model.__name__, e)
        raise ModelOutputError(text)
