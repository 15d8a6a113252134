"""Shared pytest fixtures."""

import pytest

from resend_mcp.client import EmailRequest, ProviderResponse
from resend_mcp.dispatcher import McpDispatcher
from resend_mcp.executor import ToolExecutor
from resend_mcp.tools import ToolRegistry


class FakeProvider:
    """Records provider calls and replays canned responses."""

    def __init__(
        self,
        send_response: ProviderResponse | None = None,
        audiences_response: ProviderResponse | None = None,
        raises: Exception | None = None,
    ) -> None:
        self.send_response = send_response or ProviderResponse(data={"id": "email_123"})
        self.audiences_response = audiences_response or ProviderResponse(
            data={"object": "list", "data": [{"id": "aud_1", "name": "Newsletter"}]}
        )
        self.raises = raises
        self.sent: list[EmailRequest] = []
        self.list_calls = 0
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.sent) + self.list_calls

    async def send_email(self, request: EmailRequest) -> ProviderResponse:
        self.sent.append(request)
        if self.raises is not None:
            raise self.raises
        return self.send_response

    async def list_audiences(self) -> ProviderResponse:
        self.list_calls += 1
        if self.raises is not None:
            raise self.raises
        return self.audiences_response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_dispatcher(provider: FakeProvider):
    """Factory for a dispatcher wired to the fake provider with the given defaults."""

    def _make(sender: str | None = None, reply_to: tuple[str, ...] = ()) -> McpDispatcher:
        registry = ToolRegistry(sender_email_address=sender, reply_to_email_addresses=reply_to)
        return McpDispatcher(registry, ToolExecutor(provider))

    return _make
