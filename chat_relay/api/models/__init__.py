from .chat import ChatMessage, ChatReply, ChatRequest
from .error import ErrorResponse

__all__ = [
    "ErrorResponse",
    "ChatMessage",
    "ChatReply",
    "ChatRequest",
]
