from __future__ import annotations

import asyncio
from datetime import timedelta

from printbridge.jobs import build_scheduler, remind_stale_requests
from printbridge.models import RequestDraft
from printbridge.repository import utcnow
from printbridge.runtime import build_container

from conftest import RecordingNotifier


def _seed(container, files, spec, ages: dict[str, timedelta]) -> dict[str, str]:
    async def scenario():
        ids = {}
        for label, age in ages.items():
            created = await container.repository.create(RequestDraft("C", files, spec))
            created.created_at = utcnow() - age
            await container.repository.save(created)
            ids[label] = created.id
        return ids

    return asyncio.run(scenario())


def test_stale_requests_are_reminded_once(settings, files, spec) -> None:
    container = build_container(settings)
    notifier = RecordingNotifier()
    container.notifier = notifier
    ids = _seed(
        container,
        files,
        spec,
        {
            "fresh": timedelta(hours=1),
            "crossed": timedelta(hours=24, minutes=10),
            "old": timedelta(hours=30),
        },
    )

    sent = asyncio.run(remind_stale_requests(container, utcnow()))

    assert sent == 1
    assert notifier.reminders == [(ids["crossed"], 24)]


def test_quoted_requests_are_not_reminded(settings, files, spec) -> None:
    container = build_container(settings)
    notifier = RecordingNotifier()
    container.notifier = notifier
    ids = _seed(container, files, spec, {"crossed": timedelta(hours=24, minutes=5)})

    async def quote():
        await container.lifecycle.apply_action(
            ids["crossed"], "P", "submitQuote", {"amount": "5", "estimated_delivery_days": 1}
        )
        await container.lifecycle.wait_for_notifications()

    asyncio.run(quote())
    assert asyncio.run(remind_stale_requests(container, utcnow())) == 0


def test_failing_reminder_is_skipped(settings, files, spec) -> None:
    container = build_container(settings)
    container.notifier = RecordingNotifier(fail=True)
    _seed(container, files, spec, {"crossed": timedelta(hours=24, minutes=5)})

    assert asyncio.run(remind_stale_requests(container, utcnow())) == 0


def test_scheduler_registers_stale_job(settings) -> None:
    scheduler = build_scheduler(build_container(settings))
    assert len(scheduler.get_jobs()) == 1
