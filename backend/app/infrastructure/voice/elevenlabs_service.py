"""
ElevenLabs Conversational AI Bridge

Fetches a short-lived signed WebSocket URL for the configured agent so the
browser SDK can open the audio channel without ever seeing the API key.

API Docs: https://elevenlabs.io/docs/conversational-ai/api-reference
"""

import logging
from typing import Optional
from dataclasses import dataclass

import httpx

from app.config.settings import (
    ELEVENLABS_AGENT_ID_PLACEHOLDER,
    ELEVENLABS_API_KEY_PLACEHOLDER,
    Settings,
)
from app.infrastructure.exceptions import ConfigurationError, UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass
class SignedUrl:
    """Connection credential returned to the browser."""
    signed_url: str
    agent_id: str


class ElevenLabsService:
    """
    Client for the ElevenLabs signed-URL endpoint.

    Args:
        settings: Application settings holding the API key and agent id
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    SIGNED_URL_PATH = "/v1/convai/conversation/get_signed_url"

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    def _validate_config(self) -> tuple[str, str]:
        """
        Return (api_key, agent_id) or fail with setup guidance.

        Raises:
            ConfigurationError: Key or agent id missing or still a placeholder
        """
        api_key = self._settings.elevenlabs_api_key
        agent_id = self._settings.elevenlabs_agent_id

        if not api_key or api_key == ELEVENLABS_API_KEY_PLACEHOLDER:
            logger.error("ELEVENLABS_API_KEY not properly configured")
            raise ConfigurationError(
                "ElevenLabs API key not configured",
                missing_keys=["ELEVENLABS_API_KEY"],
                setup="Add ELEVENLABS_API_KEY=sk_your_actual_key to .env with your key from elevenlabs.io",
            )

        if not agent_id or agent_id == ELEVENLABS_AGENT_ID_PLACEHOLDER:
            logger.error("ELEVENLABS_AGENT_ID not properly configured")
            raise ConfigurationError(
                "ElevenLabs agent not configured",
                missing_keys=["ELEVENLABS_AGENT_ID"],
                setup="Create a Conversational AI agent at elevenlabs.io/app/conversational-ai and set ELEVENLABS_AGENT_ID",
            )

        return api_key, agent_id

    async def get_signed_url(self) -> SignedUrl:
        """
        Request a signed conversation URL for the configured agent.

        Raises:
            ConfigurationError: Secrets missing
            UpstreamServiceError: ElevenLabs answered non-2xx (status passed through),
                could not be reached (502) or sent an unusable body (502)
        """
        api_key, agent_id = self._validate_config()

        logger.info("[ELEVENLABS] Requesting signed URL...")
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.elevenlabs_base_url,
                timeout=self._settings.elevenlabs_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self.SIGNED_URL_PATH,
                    params={"agent_id": agent_id},
                    headers={"xi-api-key": api_key},
                )
        except httpx.HTTPError as e:
            logger.error(f"[ELEVENLABS] Request failed: {e.__class__.__name__}: {e}")
            raise UpstreamServiceError(
                "Failed to reach ElevenLabs",
                service="elevenlabs",
                original_error=e,
            )

        if response.is_error:
            logger.error(
                f"[ELEVENLABS] API error: {response.status_code} {response.reason_phrase} - {response.text}"
            )
            raise UpstreamServiceError(
                "Failed to get signed URL from ElevenLabs",
                status_code=response.status_code,
                service="elevenlabs",
                body=response.text if self._settings.is_development else None,
            )

        try:
            signed_url = response.json()["signed_url"]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"[ELEVENLABS] Unexpected response body: {response.text[:200]}")
            raise UpstreamServiceError(
                "ElevenLabs returned an invalid signed URL response",
                service="elevenlabs",
                original_error=e,
            )

        logger.info("[ELEVENLABS] Signed URL obtained")
        return SignedUrl(signed_url=signed_url, agent_id=agent_id)
