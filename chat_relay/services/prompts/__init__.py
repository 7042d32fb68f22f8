from .coach_prompts import (
    DEFAULT_DIMENSION,
    DEFAULT_LANGUAGE,
    DEFAULT_SYSTEM_PROMPT_TEMPLATE,
    DEFAULT_USER_NAME,
    PROMPT_PLACEHOLDERS,
    build_system_prompt,
)

__all__ = [
    "DEFAULT_DIMENSION",
    "DEFAULT_LANGUAGE",
    "DEFAULT_SYSTEM_PROMPT_TEMPLATE",
    "DEFAULT_USER_NAME",
    "PROMPT_PLACEHOLDERS",
    "build_system_prompt",
]
