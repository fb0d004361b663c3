"""Lightweight HTTP health endpoint for deployment platforms."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from .services.auto_actions import AutoActionPipeline
from .services.llm import LLMClient

logger = logging.getLogger(__name__)

_HEALTH_PATHS = frozenset({"/", "/health", "/healthz"})


def _health_payload(llm: LLMClient, pipeline: AutoActionPipeline) -> Dict[str, Any]:
    return {
        "status": "ok",
        "llm_configured": llm.is_configured(),
        "auto_actions": pipeline.stats(),
    }


async def _respond(writer: asyncio.StreamWriter, status: str, body: bytes = b"") -> None:
    headers = [f"HTTP/1.1 {status}"]
    if body:
        headers.append("Content-Type: application/json")
    headers.append(f"Content-Length: {len(body)}")
    headers.append("Connection: close")
    writer.write(("\r\n".join(headers) + "\r\n\r\n").encode() + body)
    await writer.drain()


async def _handle_client(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    llm: LLMClient,
    pipeline: AutoActionPipeline,
) -> None:
    try:
        head = await reader.readuntil(b"\r\n\r\n")
        request_line = head.decode(errors="ignore").split("\r\n", 1)[0]
        parts = request_line.split(" ")
        method = parts[0].upper() if parts else ""
        path = parts[1] if len(parts) > 1 else ""

        if method == "GET" and path in _HEALTH_PATHS:
            body = json.dumps(_health_payload(llm, pipeline)).encode()
            await _respond(writer, "200 OK", body)
        else:
            await _respond(writer, "404 Not Found")
    except (asyncio.IncompleteReadError, asyncio.LimitOverrunError, ConnectionError) as exc:
        logger.debug("Health check connection dropped: %s", exc)
    finally:
        writer.close()
        await writer.wait_closed()


async def start_health_server(
    host: str,
    port: int,
    llm: LLMClient,
    pipeline: AutoActionPipeline,
) -> asyncio.AbstractServer:
    """Serve ``GET /``, ``/health`` and ``/healthz`` with a JSON status body."""

    return await asyncio.start_server(
        lambda reader, writer: _handle_client(reader, writer, llm, pipeline),
        host,
        port,
    )
