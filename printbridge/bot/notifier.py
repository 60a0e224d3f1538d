from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from aiogram import Bot
from aiogram.types import LinkPreviewOptions

from printbridge.bot.texts import stale_request_text, transition_text
from printbridge.models import PrintRequest


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransitionEvent:
    request_id: str
    old_status: str | None
    new_status: str
    actor_id: str


class Notifier(Protocol):
    async def notify(self, event: TransitionEvent) -> None:
        ...

    async def remind_stale(self, request: PrintRequest, hours: int) -> None:
        ...


class LoggingNotifier:
    async def notify(self, event: TransitionEvent) -> None:
        logger.info(
            "Request %s: %s -> %s by %s",
            event.request_id,
            event.old_status,
            event.new_status,
            event.actor_id,
        )

    async def remind_stale(self, request: PrintRequest, hours: int) -> None:
        logger.info("Request %s has waited %sh for a quote", request.id, hours)


class TelegramNotifier:
    """Posts lifecycle events to an operations chat."""

    def __init__(self, bot: Bot, chat_id: int):
        self.bot = bot
        self.chat_id = chat_id

    async def _send(self, text: str) -> None:
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=text,
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )

    async def notify(self, event: TransitionEvent) -> None:
        await self._send(transition_text(event))

    async def remind_stale(self, request: PrintRequest, hours: int) -> None:
        await self._send(stale_request_text(request, hours))
