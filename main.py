"""Entry-point for running the DM Redirect Discord bot."""

from __future__ import annotations

import asyncio
import logging

from dmredirect import create_bot
from dmredirect.db import Database
from dmredirect.health import start_health_server
from dmredirect.models.config import load_settings
from dmredirect.services.suppression import SuppressionStore


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


async def async_main() -> None:
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = load_settings()
    database = Database(settings.database_url)
    await database.connect()

    suppression = SuppressionStore(database)
    await suppression.load()
    storage = "database" if database.is_connected else "in-memory"
    logger.info("Replied-user state initialised using %s storage", storage)

    bot = create_bot(settings, suppression)
    health_server = await start_health_server(
        settings.health_host, settings.health_port, settings, suppression, database
    )
    try:
        await bot.start(settings.discord_token)
    finally:
        if not bot.is_closed():
            await bot.close()
        await suppression.flush()
        suppression.clear()
        health_server.close()
        await health_server.wait_closed()
        await database.close()


def main() -> None:
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
