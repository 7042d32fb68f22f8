"""
Chat relay endpoints.

Forwards frontend conversations to the upstream LLM provider.
"""
from fastapi import APIRouter, Depends, status

from chat_relay.api.dependencies.upstream import get_upstream_client
from chat_relay.api.models import ChatReply, ChatRequest, ErrorResponse
from chat_relay.config.settings import Settings, get_settings
from chat_relay.controllers.relay_controller import RelayController
from chat_relay.services.upstream import UpstreamClient

# ============================================================================
# Dependency Injection
# ============================================================================


def get_relay_controller(
    settings: Settings = Depends(get_settings),
    upstream: UpstreamClient = Depends(get_upstream_client),
) -> RelayController:
    """Dependency injection for RelayController."""
    return RelayController(settings, upstream)


# ============================================================================
# Router
# ============================================================================

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/chat",
    status_code=status.HTTP_200_OK,
    response_model=ChatReply,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Misconfiguration or internal error"},
        "default": {
            "model": ErrorResponse,
            "description": "Upstream rejected the request; the provider's own status code (429, 503, ...) is passed through",
        },
    },
)
async def chat(
    request: ChatRequest,
    controller: RelayController = Depends(get_relay_controller),
) -> ChatReply:
    """
    Relay a conversation to the LLM provider.

    Prepends the configured system prompt (personalized with userName,
    dimension and language) and returns the generated text as ``reply``.
    Provider errors are returned with the provider's status code.
    """
    return await controller.handle(request)
