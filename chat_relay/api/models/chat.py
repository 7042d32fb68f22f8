"""
Request and response models for the chat relay endpoint.
"""
import json
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessage(BaseModel):
    """A single conversation turn supplied by the frontend."""
    role: Literal["system", "user", "assistant"] = Field(..., description="Author of the message")
    content: str = Field("", description="Message text; null or missing becomes an empty string")

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)


class ChatRequest(BaseModel):
    """Payload sent by the frontend.

    - messages: conversation so far, oldest first
    - userName / dimension / language: optional context for the system prompt
    """
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage] = Field(..., min_length=1)
    user_name: Optional[str] = Field(None, alias="userName")
    dimension: Optional[str] = None
    language: Optional[str] = None


class ChatReply(BaseModel):
    """Successful relay response."""
    reply: str
