"""HTTP entry point exposing the Resend MCP tools over JSON-RPC."""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any

import anyio
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from mcp import types

from resend_mcp.client import EmailProvider, ResendClient
from resend_mcp.config import ConfigError, Settings, load_settings
from resend_mcp.dispatcher import McpDispatcher, error_response
from resend_mcp.executor import ToolExecutor
from resend_mcp.tools import ToolRegistry

logger = logging.getLogger(__name__)

SERVICE_NAME = "resend-mcp-server"


def _is_notification(payload: Any) -> bool:
    return (
        isinstance(payload, dict)
        and "id" not in payload
        and str(payload.get("method", "")).startswith("notifications/")
    )


def create_app(settings: Settings, provider: EmailProvider | None = None) -> FastAPI:
    """Wire the registry, executor and dispatcher behind the /mcp endpoint."""
    if provider is None:
        provider = ResendClient(
            settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )

    registry = ToolRegistry(
        sender_email_address=settings.sender_email_address,
        reply_to_email_addresses=settings.reply_to_email_addresses,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

    app = FastAPI(title="Resend MCP Server", version="1.0.0", lifespan=lifespan)
    app.state.dispatcher = McpDispatcher(registry, ToolExecutor(provider))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    @app.get("/mcp")
    async def mcp_get():
        return JSONResponse(
            error_response(None, -32000, "Method not allowed"),
            status_code=405,
        )

    @app.post("/mcp")
    async def mcp_post(request: Request):
        try:
            payload = json.loads(await request.body())
        except ValueError:
            return JSONResponse(error_response(None, types.PARSE_ERROR, "Parse error"), status_code=400)

        if not isinstance(payload, dict):
            return JSONResponse(
                error_response(None, types.INVALID_REQUEST, "Invalid Request"),
                status_code=400,
            )
        if _is_notification(payload):
            return Response(status_code=202)

        try:
            response = await request.app.state.dispatcher.handle_request(payload)
        except Exception:  # noqa: BLE001
            logger.exception("MCP request error")
            return JSONResponse(
                error_response(None, types.INTERNAL_ERROR, "Internal error"),
                status_code=500,
            )
        return JSONResponse(response)

    return app


async def _run(settings: Settings) -> None:
    app = create_app(settings)
    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    logger.info("Resend MCP Server running on port %d", settings.port)
    logger.info("Health: http://localhost:%d/health", settings.port)
    logger.info("MCP endpoint: http://localhost:%d/mcp", settings.port)
    await uvicorn.Server(config).serve()


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
    )
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    logger.info("Environment variables: %s", settings.summary())
    anyio.run(_run, settings)


if __name__ == "__main__":
    main()
