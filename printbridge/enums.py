from __future__ import annotations

from enum import StrEnum


class RequestStatus(StrEnum):
    REQUESTED = "requested"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    PRINTING = "printing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class RequestAction(StrEnum):
    SUBMIT_QUOTE = "submitQuote"
    ACCEPT_QUOTE = "acceptQuote"
    REJECT = "reject"
    START_PRINT = "startPrint"
    COMPLETE = "complete"


class PrintQuality(StrEnum):
    DRAFT = "draft"
    STANDARD = "standard"
    HIGH = "high"


ACTIVE_REQUEST_STATUSES = {
    RequestStatus.REQUESTED.value,
    RequestStatus.QUOTED.value,
    RequestStatus.ACCEPTED.value,
    RequestStatus.PRINTING.value,
}


TERMINAL_REQUEST_STATUSES = {
    RequestStatus.COMPLETED.value,
    RequestStatus.REJECTED.value,
}
