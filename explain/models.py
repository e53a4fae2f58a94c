"""
Result model and response schema for screenshot explanation.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from common.structured import object_schema, string_array


class Category(str, Enum):
    """Task categories the model is asked to choose from."""
    MATH = "math"
    CODE = "code"
    WRITING = "writing"
    TRANSLATION = "translation"
    FINANCE = "finance"
    SCIENCE = "science"
    GENERAL = "general"


class ScreenAssistResult(BaseModel):
    """Classification and explanation of a captured region."""
    model_config = ConfigDict(extra="forbid", strict=True)

    category: str = Field(description="Task/domain category")
    confidence: float = Field(description="Model confidence")
    summary: str = Field(description="Explanation of the region")
    followups: List[str] = Field(description="Essential follow-up questions")


SCREEN_ASSIST_SCHEMA_NAME = "ScreenAssistResponse"

SCREEN_ASSIST_SCHEMA = object_schema(
    {
        "category": {"type": "string"},
        "confidence": {"type": "number"},
        "summary": {"type": "string"},
        "followups": string_array(),
    },
    ["category", "confidence", "summary", "followups"],
)
