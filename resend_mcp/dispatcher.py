"""JSON-RPC 2.0 request handling for the MCP lifecycle methods."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Union

from mcp import types
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from resend_mcp.executor import ToolExecutor
from resend_mcp.tools import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "resend-email-service"
SERVER_VERSION = "1.0.0"

RequestId = Union[str, int, float, None]


class Method(str, Enum):
    INITIALIZE = "initialize"
    LIST_TOOLS = "tools/list"
    CALL_TOOL = "tools/call"


class MethodNotFoundError(LookupError):
    """Raised when a JSON-RPC method is not one of the supported MCP methods."""


class JsonRpcRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    jsonrpc: str
    method: str
    params: Any = None


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def success_response(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": request_id}


def error_response(request_id: RequestId, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}


class McpDispatcher:
    """Routes one JSON-RPC request to the initialize / tools/list / tools/call handlers.

    Each call is independent; the registry is read-only and the executor keeps no state,
    so concurrent requests need no coordination.
    """

    def __init__(self, registry: ToolRegistry, executor: ToolExecutor) -> None:
        self._registry = registry
        self._executor = executor

    def _initialize(self, _params: Any) -> dict[str, Any]:
        return _dump(
            types.InitializeResult(
                protocolVersion=PROTOCOL_VERSION,
                capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
                serverInfo=types.Implementation(name=SERVER_NAME, version=SERVER_VERSION),
            )
        )

    def _list_tools(self) -> dict[str, Any]:
        return _dump(types.ListToolsResult(tools=self._registry.list_tools()))

    async def _call_tool(self, params: Any) -> dict[str, Any]:
        if not isinstance(params, Mapping):
            params = {}
        name = params.get("name")
        logger.info("Calling tool %s", name)
        args = self._registry.validate(name, params.get("arguments"))
        result = await self._executor.execute(args)
        return _dump(result)

    @staticmethod
    def _route(method: str) -> Method:
        try:
            return Method(method)
        except ValueError:
            raise MethodNotFoundError(method) from None

    async def handle_request(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Produce the JSON-RPC response for ``payload``; never raises."""
        request_id = payload.get("id") if isinstance(payload, Mapping) else None
        if not isinstance(request_id, (str, int, float)) or isinstance(request_id, bool):
            request_id = None

        try:
            request = JsonRpcRequest.model_validate(payload)
        except PydanticValidationError:
            return error_response(request_id, types.INVALID_REQUEST, "Invalid Request")
        if request.jsonrpc != "2.0":
            return error_response(request_id, types.INVALID_REQUEST, "Invalid Request")

        try:
            method = self._route(request.method)
        except MethodNotFoundError:
            return error_response(request_id, types.METHOD_NOT_FOUND, "Method not found")

        try:
            if method is Method.INITIALIZE:
                result = self._initialize(request.params)
            elif method is Method.LIST_TOOLS:
                result = self._list_tools()
            else:
                result = await self._call_tool(request.params)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Request %r (%s) failed: %s", request_id, method.value, exc)
            return error_response(request_id, types.INTERNAL_ERROR, str(exc) or "Internal error")

        return success_response(request_id, result)
