# SPDX-License-Identifier: AGPL-3.0-only

"""
Pydantic models for study sessions.

A session is opened from one explained selection and holds any number of
perspective columns, each an independent conversation over that selection.
"""

import time
import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field

from .context import split_answer


def new_id() -> str:
    return uuid.uuid4().hex


class ChatMsg(BaseModel):
    """A message shown in a column."""
    role: Literal["user", "assistant"]
    text: str

    @computed_field
    @property
    def parts(self) -> List[str]:
        """Display blocks; assistant answers are split on blank lines."""
        if self.role == "assistant":
            return split_answer(self.text)
        return [self.text]


class Column(BaseModel):
    """One perspective thread."""
    id: str = Field(default_factory=new_id)
    title: str
    instruction: str = ""
    context_base: str = Field(description="Fixed prelude sent as chat context")
    chat: List[ChatMsg] = Field(default_factory=list)
    input: str = Field("", description="Unsent draft")
    loading: bool = False
    request_seq: int = Field(0, ge=0, description="Monotonic counter of questions asked")


class StudySession(BaseModel):
    id: str = Field(default_factory=new_id)
    result: Dict[str, Any] = Field(description="Explain result the session was opened from")
    columns: List[Column] = Field(default_factory=list)
    error: str = ""
    created_at: float = Field(default_factory=time.time)

    def find_column(self, column_id: str) -> Optional[Column]:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
