"""
Prompt pack for follow-up conversation over a captured region.
"""
from typing import Any, Dict, List

from .models import ChatTurn


MAX_FOLLOWUPS = 2


def build_chat_instructions(context: str) -> str:
    """System instructions with the screenshot material appended."""
    return (
        "You are a helpful general-purpose assistant.\n\n"
        "You will receive:\n"
        "- Recognized material from a screenshot\n"
        "- Conversation history\n\n"
        "Requirements:\n"
        "- Maintain conversational continuity.\n"
        "- Build upon previous answers instead of restarting.\n"
        "- Use the screenshot material when relevant.\n"
        "- If the user's question is unrelated to the screenshot, answer it normally as a general assistant.\n"
        f"- If information is insufficient, say what is missing and provide at most {MAX_FOLLOWUPS} follow-up questions.\n\n"
        f"[Screenshot Material]\n{context}\n"
    )


def normalize_history(history: Any, limit: int) -> List[ChatTurn]:
    """
    Keep only the last `limit` turns. Anything that is not a list is treated
    as empty; roles other than "assistant" become "user".
    """
    if not isinstance(history, list) or limit <= 0:
        return []

    turns = []
    for message in history[-limit:]:
        message = message if isinstance(message, dict) else {}
        role = "assistant" if message.get("role") == "assistant" else "user"
        turns.append(ChatTurn(role=role, content=str(message.get("text") or "")))
    return turns


def build_chat_input(question: str, turns: List[ChatTurn]) -> List[Dict[str, str]]:
    return [t.model_dump() for t in turns] + [{"role": "user", "content": question}]
