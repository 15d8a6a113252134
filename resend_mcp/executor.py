"""Runs validated tool calls against the email provider."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp import types

from resend_mcp.client import EmailProvider, EmailRequest, ProviderResponse
from resend_mcp.tools import ListAudiencesArgs, ProviderError, SendEmailArgs, ToolArgs, UnknownToolError

logger = logging.getLogger(__name__)


def _json(data: Any) -> str:
    return json.dumps(data, default=str)


def _text_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def build_email_request(args: SendEmailArgs) -> EmailRequest:
    return EmailRequest(
        to=args.to,
        subject=args.subject,
        text=args.text,
        from_=args.from_,
        reply_to=args.reply_to,
        html=args.html,
        scheduled_at=args.scheduled_at,
        cc=args.cc,
        bcc=args.bcc,
    )


class ToolExecutor:
    def __init__(self, provider: EmailProvider) -> None:
        self._provider = provider

    async def _call(self, failure: str, operation) -> Any:
        try:
            response: ProviderResponse = await operation()
        except Exception as exc:
            logger.warning("%s: provider call raised %s", failure, exc)
            raise ProviderError(f"{failure}: {_json({'message': str(exc)})}") from exc
        if response.error:
            raise ProviderError(f"{failure}: {_json(response.error)}")
        return response.data

    async def execute(self, args: ToolArgs) -> types.CallToolResult:
        if isinstance(args, SendEmailArgs):
            request = build_email_request(args)
            data = await self._call(
                "Email failed to send",
                lambda: self._provider.send_email(request),
            )
            return _text_result(f"Email sent successfully! {_json(data)}")

        if isinstance(args, ListAudiencesArgs):
            data = await self._call("Failed to list audiences", self._provider.list_audiences)
            return _text_result(f"Audiences found: {_json(data)}")

        raise UnknownToolError(type(args).__name__)
