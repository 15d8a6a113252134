from __future__ import annotations

# Lightweight Resend REST client helpers.

from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field


class ResendError(RuntimeError):
    """Raised when the Resend API returns a response that cannot be interpreted."""


class EmailRequest(BaseModel):
    """Outgoing email assembled from tool arguments and server defaults."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    to: str | list[str]
    subject: str
    text: str
    from_: str = Field(alias="from")
    reply_to: str | list[str] = Field(default_factory=list, alias="replyTo")
    html: Optional[str] = None
    scheduled_at: Optional[str] = Field(default=None, alias="scheduledAt")
    cc: Optional[list[str]] = None
    bcc: Optional[list[str]] = None


class ProviderResponse(BaseModel):
    """Either ``data`` or ``error`` is populated, never both."""

    data: Any = None
    error: Optional[dict[str, Any]] = None


class EmailProvider(Protocol):
    async def send_email(self, request: EmailRequest) -> ProviderResponse: ...

    async def list_audiences(self) -> ProviderResponse: ...


class ResendClient:
    """Minimal async client for the Resend REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Resend API key is required.")

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> ProviderResponse:
        """Execute an HTTP request, reporting API failures as a structured error.

        Transport failures (connection refused, timeouts) propagate as ``httpx.HTTPError``.
        """
        response = await self._client.request(method, path, json=json_body)
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {"message": response.text or "Unknown error"}
            if not isinstance(payload, dict):
                payload = {"message": str(payload)}
            return ProviderResponse(
                error={
                    "name": payload.get("name", "application_error"),
                    "message": payload.get("message") or payload.get("error") or "Unknown error",
                    "statusCode": payload.get("statusCode", response.status_code),
                }
            )
        try:
            return ProviderResponse(data=response.json())
        except ValueError as exc:
            raise ResendError(f"Resend API returned a non-JSON response ({response.status_code}).") from exc

    @staticmethod
    def _email_body(request: EmailRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "from": request.from_,
            "to": request.to,
            "subject": request.subject,
            "text": request.text,
        }
        optional = {
            "reply_to": request.reply_to,
            "html": request.html,
            "scheduled_at": request.scheduled_at,
            "cc": request.cc,
            "bcc": request.bcc,
        }
        for key, value in optional.items():
            if value is None or value == "" or value == []:
                continue
            body[key] = value
        return body

    async def send_email(self, request: EmailRequest) -> ProviderResponse:
        return await self.request("POST", "/emails", json_body=self._email_body(request))

    async def list_audiences(self) -> ProviderResponse:
        return await self.request("GET", "/audiences")
