"""
Chat service: continue a conversation scoped to one captured region.
"""
import logging
from typing import Any, Dict, List, Optional

from common.config import config
from common.llm_client import LLMClient
from common.structured import parse_llm_response
from .models import CHAT_SCHEMA, CHAT_SCHEMA_NAME, ChatAnswer
from .prompt_pack import build_chat_input, build_chat_instructions, normalize_history

logger = logging.getLogger(__name__)


class ChatService:
    """Answers questions with the screenshot material as standing context."""

    def __init__(self, llm_client: Optional[LLMClient] = None, history_limit: int = None):
        self.llm_client = llm_client or LLMClient()
        self.history_limit = config.history_limit if history_limit is None else history_limit

    def answer(self, context: str, question: str, history: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        Returns: {answer, followups}
        """
        turns = normalize_history(history, self.history_limit)
        logger.debug("Chat question with %d prior turns", len(turns))

        llm_response = self.llm_client.create_structured(
            build_chat_input(question, turns),
            CHAT_SCHEMA_NAME,
            CHAT_SCHEMA,
            instructions=build_chat_instructions(context),
        )
        return parse_llm_response(llm_response["text"], ChatAnswer).model_dump()
