"""
Prompt pack for screenshot explanation.
"""
from typing import Any, Dict, List

from .models import Category


CATEGORIES: List[str] = [c.value for c in Category]

MAX_FOLLOWUPS = 3


def build_system_prompt() -> str:
    """Fixed task description sent with every screenshot."""
    return (
        "You are an intelligent screen analysis assistant.\n\n"
        "Your task:\n"
        "1. Identify what type of task or domain the screenshot represents.\n"
        "2. Provide a clear and useful explanation.\n"
        f"3. If information is insufficient, provide at most {MAX_FOLLOWUPS} essential follow-up questions.\n\n"
        "Category must be one of:\n"
        f"[{', '.join(CATEGORIES)}]\n\n"
        "Output must strictly follow the JSON schema."
    )


def build_explain_prompt(instruction: str = "") -> str:
    """System prompt plus the optional user instruction."""
    user_instruction = str(instruction or "").strip()
    extra = f"\n\nAdditional user instruction:\n{user_instruction}" if user_instruction else ""
    return build_system_prompt() + extra


def build_explain_input(image_data_url: str, instruction: str = "") -> List[Dict[str, Any]]:
    """Single user turn carrying the prompt text followed by the image."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "input_text", "text": build_explain_prompt(instruction)},
                {"type": "input_image", "image_url": image_data_url},
            ],
        }
    ]
