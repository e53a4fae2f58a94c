# SPDX-License-Identifier: AGPL-3.0-only

"""
Perspective definitions and the per-column context prelude.
"""

import re
from typing import Any, Dict, List

DEFAULT_PERSPECTIVES: List[Dict[str, str]] = [
    {
        "title": "Explain",
        "instruction": (
            "Explain clearly and concretely. Prefer step-by-step reasoning "
            "and local evidence from the screenshot."
        ),
    },
]

EXTRA_PERSPECTIVE_INSTRUCTION = (
    "Provide a different helpful angle. Be concrete. Use the screenshot context, not generic talk."
)

QUICK_ACTIONS: Dict[str, str] = {
    "3-bullets": "Summarize the key points in 3 bullets.",
    "assumptions": "What are the main assumptions here?",
    "next-step": "Give me a concrete next step.",
}

# Suggested follow-ups offered as one-click questions
MAX_SUGGESTED_FOLLOWUPS = 4

PRIMARY_COLUMN_TITLE = "Explain"


def build_context_base(result: Dict[str, Any], title: str, instruction: str) -> str:
    """Fixed prelude for a column: perspective plus the recognition result."""
    followups = result.get("followups") or []
    return "\n".join([
        "You are assisting with a selected screenshot region from a PDF.",
        f"Perspective: {title}",
        f"Perspective instruction: {instruction}",
        "",
        "Recognition Summary:",
        str(result.get("summary", "")),
        "",
        "Candidate Follow-ups:",
        "\n".join(f"{i + 1}. {s}" for i, s in enumerate(followups)),
    ])


def next_perspective_title(column_count: int) -> str:
    return f"Perspective {column_count + 1}"


def clean_answer(text: Any) -> str:
    """Turn literal backslash-n sequences from the model into newlines."""
    return str(text or "").replace("\\n", "\n")


def split_answer(text: str) -> List[str]:
    """Display blocks of an assistant message: paragraphs separated by blank lines."""
    return [part.strip() for part in re.split(r"\n{2,}", text) if part.strip()]
