from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Iterable

from printbridge.enums import RequestStatus
from printbridge.models import PrintRequest


def filter_by_material(requests: Iterable[PrintRequest], material: str | None) -> list[PrintRequest]:
    if not material or material == "all":
        return list(requests)
    needle = material.strip().lower()
    return [item for item in requests if needle in item.specification.material.lower()]


def filter_by_status(requests: Iterable[PrintRequest], *statuses: str) -> list[PrintRequest]:
    wanted = {status for status in statuses if status and status != "all"}
    if not wanted:
        return list(requests)
    return [item for item in requests if item.status in wanted]


def sort_by_created_at(requests: Iterable[PrintRequest], descending: bool = True) -> list[PrintRequest]:
    return sorted(requests, key=lambda item: item.created_at, reverse=descending)


def search(requests: Iterable[PrintRequest], term: str | None) -> list[PrintRequest]:
    """Case-insensitive match on material, notes and location."""
    if not term or not term.strip():
        return list(requests)
    needle = term.strip().lower()
    result = []
    for item in requests:
        spec = item.specification
        haystack = " ".join(part for part in (spec.material, spec.notes, spec.location) if part)
        if needle in haystack.lower():
            result.append(item)
    return result


def count_by_status(requests: Iterable[PrintRequest]) -> dict[str, int]:
    counts = Counter(item.status for item in requests)
    return {status.value: counts.get(status.value, 0) for status in RequestStatus}


def total_quoted_amount(requests: Iterable[PrintRequest]) -> Decimal:
    return sum((item.quote.amount for item in requests if item.quote is not None), Decimal("0"))
