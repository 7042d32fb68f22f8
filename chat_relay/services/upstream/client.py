"""
HTTP client for the upstream completion provider.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

import httpx

from chat_relay.config.settings import Settings
from chat_relay.services.upstream.payloads import ENDPOINT_PATHS, build_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamResult:
    """Status code and decoded JSON body of one provider call."""

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_message(self, fallback: str) -> str:
        """Provider's ``error.message``, or ``fallback`` when it has none."""
        if isinstance(self.body, dict):
            error = self.body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
        return fallback


class UpstreamClient:
    """Posts assembled conversations to the provider.

    The underlying ``httpx.AsyncClient`` is owned by the application
    lifespan and shared across requests.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client

    @property
    def url(self) -> str:
        return self.settings.openai_base_url + ENDPOINT_PATHS[self.settings.upstream_api]

    async def complete(self, messages: List[Dict[str, str]]) -> UpstreamResult:
        """
        Send one completion request.

        Args:
            messages: system prompt followed by the caller's messages

        Returns:
            UpstreamResult for any HTTP status; non-2xx bodies are decoded too

        Raises:
            httpx.HTTPError: on transport failures and timeouts
            ValueError: if the provider body is not valid JSON
        """
        payload = build_payload(
            self.settings.upstream_api, self.settings.openai_model, messages
        )
        response = await self.http_client.post(
            self.url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.settings.openai_api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.upstream_timeout,
        )
        logger.debug(f"Upstream {self.url} answered {response.status_code}")
        return UpstreamResult(status_code=response.status_code, body=response.json())
