"""
Upstream client dependencies for FastAPI endpoints.
"""
from fastapi import Depends, Request

from chat_relay.config.settings import Settings, get_settings
from chat_relay.services.upstream import UpstreamClient


def get_upstream_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> UpstreamClient:
    """Wrap the application's shared HTTP client for this request."""
    return UpstreamClient(settings, request.app.state.http_client)
