"""Push service — sends mobile notifications through the FCM HTTP v1 API."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from ride_gateway.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"


class PushDeliveryError(Exception):
    """Raised when a push message could not be handed to the provider."""


class PushSender(Protocol):
    async def send(
        self, token: str, title: str, body: str, data: dict[str, str] | None = None
    ) -> dict[str, Any]: ...


class FCMPushSender:
    """Async wrapper around Firebase Cloud Messaging.

    Credential loading is out of scope: an OAuth access token and the
    project id are read from settings as-is.
    """

    def __init__(
        self,
        config: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or default_settings
        self._client = client

    def build_message(
        self, token: str, title: str, body: str, data: dict[str, str] | None = None
    ) -> dict[str, Any]:
        # FCM requires every data value to be a string
        return {
            "message": {
                "token": token,
                "notification": {"title": title, "body": body},
                "data": {key: str(value) for key, value in (data or {}).items()},
            }
        }

    async def send(
        self, token: str, title: str, body: str, data: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """Send one notification to *token* and return the provider response."""
        if not self._config.fcm_project_id or not self._config.fcm_access_token:
            raise PushDeliveryError("FCM is not configured")

        url = FCM_SEND_URL.format(project_id=self._config.fcm_project_id)
        headers = {
            "Authorization": f"Bearer {self._config.fcm_access_token}",
            "Content-Type": "application/json",
        }
        payload = self.build_message(token, title, body, data)

        try:
            if self._client is not None:
                resp = await self._client.post(
                    url, json=payload, headers=headers,
                    timeout=self._config.push_timeout_seconds,
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self._config.push_timeout_seconds
                ) as client:
                    resp = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.exception("Push request error: %s", exc)
            raise PushDeliveryError(str(exc)) from exc

        if resp.status_code != 200:
            logger.error("Push send failed: %s %s", resp.status_code, resp.text)
            raise PushDeliveryError(f"FCM responded with {resp.status_code}")

        logger.info("Push notification sent: %s", title)
        return resp.json()
