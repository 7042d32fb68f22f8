"""
Relay controller for chat completions.

Validates a frontend conversation, prepends the system prompt, forwards it
to the upstream provider and translates the answer into a ChatReply.
"""
import logging
from typing import Dict, List

import httpx

from chat_relay.api.models.chat import ChatRequest, ChatReply
from chat_relay.config.settings import Settings
from chat_relay.controllers.errors import (
    InvalidInputError,
    MisconfigurationError,
    TransportFailureError,
    UpstreamFailureError,
)
from chat_relay.services.prompts import build_system_prompt
from chat_relay.services.upstream import UpstreamClient, classify_response, extract_text

logger = logging.getLogger(__name__)

MISSING_MESSAGES_ERROR = "Missing or invalid 'messages' in payload (must be a non-empty array)"
MISSING_API_KEY_ERROR = "Server misconfigured: OPENAI_API_KEY missing"
UPSTREAM_FALLBACK_ERROR = "OpenAI request failed"
INTERNAL_ERROR = "Internal Server Error"


class RelayController:
    """Controller for relaying one chat request upstream."""

    def __init__(self, settings: Settings, upstream: UpstreamClient):
        self.settings = settings
        self.upstream = upstream

    def _validate_request(self, request: ChatRequest) -> None:
        """
        Validate the relay request.

        Raises:
            InvalidInputError: If messages are missing or empty
            MisconfigurationError: If no API credential is configured
        """
        if not request.messages:
            raise InvalidInputError(MISSING_MESSAGES_ERROR)

        if not self.settings.has_api_key:
            logger.error("OPENAI_API_KEY is not set")
            raise MisconfigurationError(MISSING_API_KEY_ERROR)

    def build_messages(self, request: ChatRequest) -> List[Dict[str, str]]:
        """System prompt followed by the caller's messages in original order."""
        system_prompt = build_system_prompt(
            self.settings.system_prompt_template,
            user_name=request.user_name,
            dimension=request.dimension,
            language=request.language,
        )
        return [
            system_prompt,
            *({"role": m.role, "content": m.content} for m in request.messages),
        ]

    async def handle(self, request: ChatRequest) -> ChatReply:
        """
        Relay a conversation and return the generated reply.

        Args:
            request: Validated ChatRequest from the frontend

        Returns:
            ChatReply with the extracted text (possibly empty)

        Raises:
            InvalidInputError, MisconfigurationError: before any outbound call
            UpstreamFailureError: provider answered with a non-2xx status
            TransportFailureError: network, timeout or decoding failure
        """
        self._validate_request(request)
        messages = self.build_messages(request)

        logger.info(
            f"Relaying {len(request.messages)} message(s) to {self.settings.upstream_api} "
            f"model={self.settings.openai_model}"
        )

        try:
            result = await self.upstream.complete(messages)
        except httpx.TimeoutException as e:
            logger.error(f"Upstream request timed out: {e!r}")
            raise TransportFailureError(INTERNAL_ERROR) from e
        except Exception as e:
            logger.error(f"Upstream request failed: {e!r}", exc_info=True)
            raise TransportFailureError(INTERNAL_ERROR) from e

        if not result.ok:
            logger.error(f"OpenAI error {result.status_code}: {result.body}")
            raise UpstreamFailureError(
                result.error_message(UPSTREAM_FALLBACK_ERROR),
                status_code=result.status_code,
            )

        output = classify_response(result.body)
        reply = extract_text(output)
        logger.info(f"Sending reply ({output.kind}, {len(reply)} chars)")
        return ChatReply(reply=reply)
