"""
Outbound payload construction for the supported provider APIs.
"""
from typing import Any, Dict, List

# API variant -> path relative to the provider base URL
ENDPOINT_PATHS = {
    "responses": "/responses",
    "chat_completions": "/chat/completions",
}


def build_payload(api: str, model: str, messages: List[Dict[str, str]]) -> Dict[str, Any]:
    """
    Build the JSON body for one completion request.

    The Responses API takes the conversation under ``input``; the legacy
    Chat Completions API takes it under ``messages``.
    """
    if api == "responses":
        return {"model": model, "input": messages}
    if api == "chat_completions":
        return {"model": model, "messages": messages}
    raise ValueError(f"Unsupported upstream API: {api}")
