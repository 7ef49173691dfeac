"""Lightweight HTTP health endpoint for deployment platforms."""

from __future__ import annotations

import asyncio
import json

from .db import Database
from .models.config import BotSettings
from .services.suppression import SuppressionStore


async def _handle_client(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    settings: BotSettings,
    suppression: SuppressionStore,
    database: Database,
) -> None:
    try:
        data = await reader.readuntil(b"\r\n\r\n")
    except (asyncio.IncompleteReadError, asyncio.LimitOverrunError):
        writer.close()
        await writer.wait_closed()
        return

    request_line = data.decode(errors="ignore").split("\r\n", 1)[0]
    method, path, *_ = request_line.split(" ") + ["", ""]
    if method.upper() != "GET" or path not in {"/", "/health", "/healthz"}:
        response = "HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"
        writer.write(response.encode())
        await writer.drain()
        writer.close()
        await writer.wait_closed()
        return

    config = settings.reply_configuration()
    payload = {
        "status": "ok",
        "test_mode": config.test_mode,
        "guild_id": config.guild_id,
        "suppressed_users": len(suppression),
        "database_connected": database.is_connected if database else False,
        "version": settings.version,
    }
    body = json.dumps(payload).encode()
    response = (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    ).encode() + body
    writer.write(response)
    await writer.drain()
    writer.close()
    await writer.wait_closed()


async def start_health_server(
    host: str,
    port: int,
    settings: BotSettings,
    suppression: SuppressionStore,
    database: Database,
) -> asyncio.AbstractServer:
    server = await asyncio.start_server(
        lambda r, w: _handle_client(r, w, settings, suppression, database),
        host,
        port,
    )
    return server
