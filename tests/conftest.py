from __future__ import annotations

from pathlib import Path

import pytest

from printbridge.bot.notifier import TransitionEvent
from printbridge.config import Settings
from printbridge.materials import default_materials
from printbridge.models import FileDescriptor, PrintRequest, Specification
from printbridge.repository import InMemoryRequestRepository
from printbridge.services.lifecycle import LifecycleService
from printbridge.services.payment import SimulatedPaymentService


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[TransitionEvent] = []
        self.reminders: list[tuple[str, int]] = []

    async def notify(self, event: TransitionEvent) -> None:
        if self.fail:
            raise RuntimeError("notification backend is down")
        self.events.append(event)

    async def remind_stale(self, request: PrintRequest, hours: int) -> None:
        if self.fail:
            raise RuntimeError("notification backend is down")
        self.reminders.append((request.id, hours))


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_path=str(tmp_path / "test.sqlite3"),
        storage_backend="memory",
        materials_file=str(tmp_path / "materials.json"),
        web_host="127.0.0.1",
        web_port=8080,
        allowed_file_extensions=(".stl", ".obj"),
        max_file_size_mb=10,
        stale_request_hours=24,
        reminder_scan_minutes=30,
        scheduler_enabled=False,
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def service(settings: Settings, notifier: RecordingNotifier) -> LifecycleService:
    return LifecycleService(
        repository=InMemoryRequestRepository(),
        notifier=notifier,
        payment_service=SimulatedPaymentService(),
        materials=default_materials(),
        settings=settings,
    )


@pytest.fixture()
def files() -> list[FileDescriptor]:
    return [FileDescriptor(name="bracket.stl", size=2048, mime_type="model/stl")]


@pytest.fixture()
def spec() -> Specification:
    return Specification(material="PLA", quality="standard", quantity=2)
