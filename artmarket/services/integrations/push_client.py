"""
Push service client (FCM HTTP endpoint) with dry-run mode for development.
"""

import logging

import httpx

from artmarket.core.errors import PushDeliveryError
from artmarket.services.integrations.http_client import create_httpx_client

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"", "test_key", "changeme"}


def build_push_message(title: str, body: str, route_name: str | None = None) -> dict:
    """Message in the {notification: {title, body}, data?: {routeName}} shape."""
    message: dict = {"notification": {"title": title, "body": body}}
    if route_name:
        message["data"] = {"routeName": route_name}
    return message


class PushClient:
    def __init__(
        self,
        url: str,
        server_key: str | None = None,
        dry_run: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        # Force dry-run if credentials are placeholders/missing
        self.dry_run = dry_run or (server_key or "") in PLACEHOLDER_KEYS
        headers = {"Content-Type": "application/json"}
        if server_key:
            headers["Authorization"] = f"key={server_key}"
        self._client = create_httpx_client(headers=headers, transport=transport)

    async def send_to_device(self, token: str, message: dict) -> dict:
        """
        Send a push message to one device token.

        Args:
            token: Registered device token
            message: {notification: {title, body}, data?: {routeName}}

        Returns:
            dict with status and message_id (None in dry-run)

        Raises:
            PushDeliveryError: If the push service cannot be reached or rejects the message
        """
        if self.dry_run:
            logger.info(f"[DRY-RUN] Would push to {token[:12]}...: {message.get('notification')}")
            return {"status": "dry_run", "message_id": None}

        try:
            response = await self._client.post(self.url, json={"to": token, **message})
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PushDeliveryError(f"Push delivery failed: {e}") from e

        if result.get("failure"):
            error = (result.get("results") or [{}])[0].get("error", "unknown")
            raise PushDeliveryError(f"Push rejected by service: {error}")

        return {
            "status": "sent",
            "message_id": (result.get("results") or [{}])[0].get("message_id"),
        }

    async def aclose(self) -> None:
        await self._client.aclose()
