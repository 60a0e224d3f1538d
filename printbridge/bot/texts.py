from __future__ import annotations

from typing import TYPE_CHECKING

from printbridge.enums import RequestStatus

if TYPE_CHECKING:
    from printbridge.bot.notifier import TransitionEvent
    from printbridge.models import PrintRequest


STATUS_LABELS: dict[str, str] = {
    RequestStatus.REQUESTED.value: "Quote requested",
    RequestStatus.QUOTED.value: "Quote received",
    RequestStatus.ACCEPTED.value: "Payment confirmed",
    RequestStatus.PRINTING.value: "Being printed",
    RequestStatus.COMPLETED.value: "Ready for pickup",
    RequestStatus.REJECTED.value: "Rejected",
}

# Vocabulary written by older dashboard clients.
LEGACY_STATUS_LABELS: dict[str, str] = {
    RequestStatus.REQUESTED.value: "quote-requested",
    RequestStatus.QUOTED.value: "quote-submitted",
    RequestStatus.ACCEPTED.value: "quote-accepted",
    RequestStatus.PRINTING.value: "printing",
    RequestStatus.COMPLETED.value: "completed",
    RequestStatus.REJECTED.value: "rejected",
}

LEGACY_ALIASES: dict[str, str] = {
    "pending": RequestStatus.REQUESTED.value,
    "paid": RequestStatus.ACCEPTED.value,
    "in-progress": RequestStatus.PRINTING.value,
    "in_progress": RequestStatus.PRINTING.value,
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def legacy_label(status: str) -> str:
    return LEGACY_STATUS_LABELS.get(status, status)


def parse_status(label: str) -> str | None:
    """Map a canonical or legacy status label to the canonical status."""
    key = label.strip().lower()
    if key in STATUS_LABELS:
        return key
    for status, legacy in LEGACY_STATUS_LABELS.items():
        if legacy == key:
            return status
    return LEGACY_ALIASES.get(key)


def transition_text(event: TransitionEvent) -> str:
    if event.old_status is None:
        return (
            "NEW PRINT REQUEST\n"
            f"Request ID: {event.request_id}\n"
            f"Customer: {event.actor_id}"
        )
    return (
        f"REQUEST {legacy_label(event.new_status).upper()}\n"
        f"Request ID: {event.request_id}\n"
        f"Status: {status_label(event.old_status)} -> {status_label(event.new_status)}\n"
        f"By: {event.actor_id}"
    )


def stale_request_text(request: PrintRequest, hours: int) -> str:
    spec = request.specification
    return (
        "REQUEST WAITING FOR QUOTE\n"
        f"Request ID: {request.id}\n"
        f"{spec.material} • {spec.quality} • {spec.quantity}x\n"
        f"No provider has quoted for {hours}h."
    )
