from __future__ import annotations

import asyncio
import logging

import uvicorn

from printbridge.api import create_api
from printbridge.config import load_settings
from printbridge.jobs import build_scheduler
from printbridge.runtime import build_container


async def run() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = build_container(settings)

    scheduler = build_scheduler(container)
    if settings.scheduler_enabled:
        scheduler.start()

    api = create_api(container=container)
    config = uvicorn.Config(
        app=api,
        host=settings.web_host,
        port=settings.web_port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config=config)

    try:
        await server.serve()
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        await container.lifecycle.wait_for_notifications()
        if container.bot is not None:
            await container.bot.session.close()


if __name__ == "__main__":
    asyncio.run(run())
