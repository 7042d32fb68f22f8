"""
Facilitator-coach prompts for relayed chat conversations.
"""
from typing import Dict, Optional

PROMPT_PLACEHOLDERS = frozenset({"user_name", "dimension", "language"})

DEFAULT_USER_NAME = "Unknown"
DEFAULT_DIMENSION = "None"
DEFAULT_LANGUAGE = "the same language as the user (Hebrew or English)"

DEFAULT_SYSTEM_PROMPT_TEMPLATE = (
    "You are a facilitator coach. Your job is to provide deep, meaningful feedback and ask reflective questions. "
    "Be direct yet supportive. Use probing questions, summarize patterns, suggest next steps, and avoid generic advice. "
    "User name: {user_name}. "
    "Dimension/context: {dimension}. "
    "Reply in {language}."
)


def build_system_prompt(
    template: str,
    user_name: Optional[str] = None,
    dimension: Optional[str] = None,
    language: Optional[str] = None,
) -> Dict[str, str]:
    """
    Render the system message that precedes every relayed conversation.

    Blank values fall back to the defaults above.
    """
    content = template.format(
        user_name=user_name or DEFAULT_USER_NAME,
        dimension=dimension or DEFAULT_DIMENSION,
        language=language or DEFAULT_LANGUAGE,
    )
    return {"role": "system", "content": content}
