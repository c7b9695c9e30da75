"""ZeptoMail implementation of NotificationSender.

Delivery is best-effort: every failure (missing token, non-2xx response,
transport error, timeout) is logged and returned as a failed DeliveryResult.
Nothing is retried here.
"""

from __future__ import annotations

from typing import Optional

import httpx

from config import EmailSettings
from infrastructure.email.protocol import DeliveryResult
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"


class ZeptoMailSender:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: Optional[httpx.AsyncClient] = None,
        api_url: str = _ZEPTO_API_URL,
    ) -> None:
        self._settings = settings
        self._api_url = api_url
        self._client = http_client or httpx.AsyncClient(
            timeout=settings.email_timeout_seconds
        )

    def _auth_header(self) -> str:
        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"
        return token

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        to_name: Optional[str] = None,
    ) -> DeliveryResult:
        if not self._settings.zepto_api_token:
            log.error("email_send_failed", to_email=to, reason="token_not_configured")
            return DeliveryResult(success=False, error="Email provider is not configured")

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to, "name": to_name or to}}],
            "reply_to": [{"address": self._settings.zepto_from_email}],
            "subject": subject,
            "htmlbody": html,
        }
        if text:
            payload["textbody"] = text

        headers = {
            "Authorization": self._auth_header(),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult(success=False, error=str(e) or type(e).__name__)

        if response.status_code in (200, 201, 202):
            message_id = None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message_id = body.get("request_id")
            log.info("email_sent_success", to_email=to, subject=subject, message_id=message_id)
            return DeliveryResult(success=True, message_id=message_id)

        log.error(
            "email_send_failed",
            to_email=to,
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return DeliveryResult(
            success=False, error=f"Email provider returned {response.status_code}"
        )

    async def aclose(self) -> None:
        await self._client.aclose()
