"""
Chat turn and answer models, plus the ChatResponse schema.
"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from common.structured import object_schema, string_array


class ChatTurn(BaseModel):
    """One prior message as forwarded to the model."""
    role: Literal["user", "assistant"]
    content: str


class ChatAnswer(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    answer: str = Field(description="Answer to the question")
    followups: List[str] = Field(description="Follow-up questions")


CHAT_SCHEMA_NAME = "ChatResponse"

CHAT_SCHEMA = object_schema(
    {
        "answer": {"type": "string"},
        "followups": string_array(),
    },
    ["answer", "followups"],
)
