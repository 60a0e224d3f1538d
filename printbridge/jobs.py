from __future__ import annotations

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from printbridge.enums import RequestStatus
from printbridge.repository import utcnow
from printbridge.runtime import AppContainer


logger = logging.getLogger(__name__)


async def remind_stale_requests(container: AppContainer, now: datetime) -> int:
    """Send one reminder for every request that became stale since the last scan.

    A request is reminded about when its age crosses ``stale_request_hours``
    inside the current scan window, so every request is reported once
    without storing a flag.
    """
    settings = container.settings
    window_end = now - timedelta(hours=settings.stale_request_hours)
    window_start = window_end - timedelta(minutes=settings.reminder_scan_minutes)

    waiting = await container.repository.list_by_status(RequestStatus.REQUESTED.value)
    sent = 0
    for request in waiting:
        if request.provider_id is not None:
            continue
        if not (window_start < request.created_at <= window_end):
            continue
        try:
            await container.notifier.remind_stale(request, settings.stale_request_hours)
        except Exception:
            logger.exception("Stale reminder failed for %s", request.id)
            continue
        sent += 1
    if sent:
        logger.info("Sent %s stale request reminders", sent)
    return sent


def build_scheduler(container: AppContainer) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")

    async def stale_requests_job() -> None:
        await remind_stale_requests(container, utcnow())

    scheduler.add_job(stale_requests_job, "interval", minutes=container.settings.reminder_scan_minutes)
    return scheduler
