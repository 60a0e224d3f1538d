from __future__ import annotations

from dataclasses import dataclass

from aiogram import Bot

from printbridge.bot.notifier import LoggingNotifier, Notifier, TelegramNotifier
from printbridge.config import Settings, load_settings
from printbridge.db import init_db
from printbridge.materials import Material, load_materials
from printbridge.repository import InMemoryRequestRepository, RequestRepository, SqliteRequestRepository
from printbridge.services.lifecycle import LifecycleService
from printbridge.services.payment import SimulatedPaymentService


@dataclass(slots=True)
class AppContainer:
    settings: Settings
    materials: dict[str, Material]
    repository: RequestRepository
    payment_service: SimulatedPaymentService
    notifier: Notifier
    lifecycle: LifecycleService
    bot: Bot | None = None


def build_repository(settings: Settings) -> RequestRepository:
    if settings.storage_backend == "memory":
        return InMemoryRequestRepository()
    init_db(settings.database_path)
    return SqliteRequestRepository(settings.database_path)


def build_container(settings: Settings | None = None) -> AppContainer:
    settings = settings or load_settings()
    materials = load_materials(settings.materials_file)
    repository = build_repository(settings)
    payment_service = SimulatedPaymentService()

    bot: Bot | None = None
    notifier: Notifier = LoggingNotifier()
    if settings.telegram_bot_token and settings.telegram_chat_id is not None:
        bot = Bot(token=settings.telegram_bot_token)
        notifier = TelegramNotifier(bot, settings.telegram_chat_id)

    lifecycle = LifecycleService(
        repository=repository,
        notifier=notifier,
        payment_service=payment_service,
        materials=materials,
        settings=settings,
    )
    return AppContainer(
        settings=settings,
        materials=materials,
        repository=repository,
        payment_service=payment_service,
        notifier=notifier,
        lifecycle=lifecycle,
        bot=bot,
    )
