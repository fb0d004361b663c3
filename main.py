"""Entry-point for running the Warden Discord bot."""

from __future__ import annotations

import asyncio
import logging

from warden import create_bot
from warden.health import start_health_server
from warden.models.config import load_settings
from warden.services.llm import LLMClient


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


async def async_main() -> None:
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = load_settings()

    llm = LLMClient(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
    )
    if llm.is_configured():
        logger.info("Using LLM model %s", llm.model)
    else:
        logger.warning("No OPENAI_API_KEY set - replies and auto actions are disabled")

    bot = create_bot(settings, llm)
    health_server = await start_health_server(
        settings.health_host, settings.health_port, llm, bot.router.pipeline
    )
    try:
        async with bot:
            await bot.start(settings.discord_token)
    finally:
        health_server.close()
        await health_server.wait_closed()


def main() -> None:
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
