"""Tool catalog and argument validation for the Resend MCP server."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from mcp import types


class ToolError(RuntimeError):
    """Base class for failures reported to the caller as a JSON-RPC internal error."""


class ValidationError(ToolError):
    """Raised when tool arguments are missing or cannot be resolved."""


class UnknownToolError(ToolError):
    """Raised when a tool name is not in the registry."""

    def __init__(self, name: Any) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ProviderError(ToolError):
    """Raised when the email provider reports a failure or cannot be reached."""


class ToolName(str, Enum):
    SEND_EMAIL = "send-email"
    LIST_AUDIENCES = "list-audiences"

    @classmethod
    def parse(cls, name: Any) -> "ToolName":
        try:
            return cls(name)
        except ValueError:
            raise UnknownToolError(name) from None


_EMAIL_ARRAY = {"type": "array", "items": {"type": "string", "format": "email"}}


def build_tool_definitions(
    sender_email_address: str | None,
    reply_to_email_addresses: Sequence[str],
) -> tuple[types.Tool, ...]:
    """Build the tool catalog; ``from``/``replyTo`` are exposed only when no default is configured."""
    properties: dict[str, Any] = {
        "to": {
            "type": "string",
            "format": "email",
            "description": "Recipient email address",
        },
        "subject": {"type": "string", "description": "Email subject line"},
        "text": {"type": "string", "description": "Plain text email content"},
        "html": {
            "type": "string",
            "description": (
                "HTML email content. When provided, the plain text argument MUST be provided as well."
            ),
        },
        "cc": {
            **_EMAIL_ARRAY,
            "description": (
                "Optional array of CC email addresses. You MUST ask the user for this parameter. "
                "Under no circumstance provide it yourself"
            ),
        },
        "bcc": {
            **_EMAIL_ARRAY,
            "description": (
                "Optional array of BCC email addresses. You MUST ask the user for this parameter. "
                "Under no circumstance provide it yourself"
            ),
        },
        "scheduledAt": {
            "type": "string",
            "description": (
                "Optional parameter to schedule the email. This uses natural language. Examples would be "
                "'tomorrow at 10am' or 'in 2 hours' or 'next day at 9am PST' or 'Friday at 3pm ET'."
            ),
        },
    }
    if not sender_email_address:
        properties["from"] = {
            "type": "string",
            "format": "email",
            "description": (
                "Sender email address. You MUST ask the user for this parameter. "
                "Under no circumstance provide it yourself"
            ),
        }
    if not reply_to_email_addresses:
        properties["replyTo"] = {
            **_EMAIL_ARRAY,
            "description": (
                "Optional email addresses for the email readers to reply to. You MUST ask the user "
                "for this parameter. Under no circumstance provide it yourself"
            ),
        }

    return (
        types.Tool(
            name=ToolName.SEND_EMAIL.value,
            description="Send an email using Resend",
            inputSchema={
                "type": "object",
                "properties": properties,
                "required": ["to", "subject", "text"],
            },
        ),
        types.Tool(
            name=ToolName.LIST_AUDIENCES.value,
            description="List all audiences from Resend",
            inputSchema={"type": "object", "properties": {}},
        ),
    )


@dataclass(frozen=True)
class SendEmailArgs:
    to: str | list[str]
    subject: str
    text: str
    from_: str
    reply_to: list[str]
    html: Optional[str] = None
    scheduled_at: Optional[str] = None
    cc: Optional[list[str]] = None
    bcc: Optional[list[str]] = None


@dataclass(frozen=True)
class ListAudiencesArgs:
    pass


ToolArgs = Union[SendEmailArgs, ListAudiencesArgs]


def _require(arguments: Mapping[str, Any], key: str) -> Any:
    value = arguments.get(key)
    if value in (None, "", [], {}):
        raise ValidationError(f"Missing required argument '{key}'.")
    return value


def _require_str(arguments: Mapping[str, Any], key: str) -> str:
    value = _require(arguments, key)
    if not isinstance(value, str):
        raise ValidationError(f"Argument '{key}' must be a string.")
    return value


def _as_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValidationError(f"{key} argument must be an email address or a list of email addresses.")


def _optional_str(arguments: Mapping[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if not value:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Argument '{key}' must be a string.")
    return value


def _optional_list(arguments: Mapping[str, Any], key: str) -> Optional[list[str]]:
    value = arguments.get(key)
    return _as_list(value, key) if value else None


@dataclass(frozen=True)
class ToolRegistry:
    """Immutable tool catalog plus the server-level defaults it was built from."""

    sender_email_address: str | None = None
    reply_to_email_addresses: tuple[str, ...] = ()
    tools: tuple[types.Tool, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "tools",
            build_tool_definitions(self.sender_email_address, self.reply_to_email_addresses),
        )

    def list_tools(self) -> list[types.Tool]:
        return list(self.tools)

    def validate(self, name: Any, arguments: Mapping[str, Any] | None) -> ToolArgs:
        """Check raw arguments for ``name`` and merge in the server defaults."""
        tool = ToolName.parse(name)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise ValidationError("arguments must be provided as an object.")

        if tool is ToolName.LIST_AUDIENCES:
            return ListAudiencesArgs()

        to = _require(arguments, "to")
        if not isinstance(to, str):
            to = _as_list(to, "to")
        subject = _require_str(arguments, "subject")
        text = _require_str(arguments, "text")

        from_address = arguments.get("from")
        if from_address is None:
            from_address = self.sender_email_address
        if not isinstance(from_address, str) or not from_address:
            raise ValidationError("from argument must be provided.")

        reply_to = arguments.get("replyTo")
        if reply_to is None:
            reply_to = list(self.reply_to_email_addresses)
        reply_to = _as_list(reply_to, "replyTo")

        return SendEmailArgs(
            to=to,
            subject=subject,
            text=text,
            from_=from_address,
            reply_to=reply_to,
            html=_optional_str(arguments, "html"),
            scheduled_at=_optional_str(arguments, "scheduledAt"),
            cc=_optional_list(arguments, "cc"),
            bcc=_optional_list(arguments, "bcc"),
        )
