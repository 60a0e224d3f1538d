from __future__ import annotations

from datetime import datetime, timezone

import pytest

from printbridge.enums import (
    ACTIVE_REQUEST_STATUSES,
    TERMINAL_REQUEST_STATUSES,
    RequestAction,
    RequestStatus,
)
from printbridge.errors import ForbiddenError, InvalidTransitionError
from printbridge.models import PrintRequest, Specification
from printbridge.state_machine import TRANSITIONS, allowed_actions, ensure_transition


def _request(status: str, provider_id: str | None = None) -> PrintRequest:
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return PrintRequest(
        id="PR-1",
        customer_id="customer",
        files=[],
        specification=Specification(material="PLA", quality="standard", quantity=1),
        status=status,
        created_at=now,
        updated_at=now,
        provider_id=provider_id,
    )


def test_valid_transition_chain() -> None:
    assert ensure_transition(_request("requested"), "provider", "submitQuote").target == "quoted"
    assert ensure_transition(_request("quoted", "provider"), "customer", "acceptQuote").target == "accepted"
    assert ensure_transition(_request("accepted", "provider"), "provider", "startPrint").target == "printing"
    assert ensure_transition(_request("printing", "provider"), "provider", "complete").target == "completed"


def test_reject_rows() -> None:
    assert ensure_transition(_request("requested"), "customer", "reject").target == "rejected"
    assert ensure_transition(_request("requested"), "provider", "reject").target == "rejected"
    assert ensure_transition(_request("quoted", "provider"), "customer", "reject").target == "rejected"
    assert ensure_transition(_request("quoted", "provider"), "provider", "reject").target == "rejected"


_MISSING_ROWS = [
    (status.value, action.value)
    for status in RequestStatus
    for action in RequestAction
    if (status.value, action.value) not in TRANSITIONS
]


@pytest.mark.parametrize(("status", "action"), _MISSING_ROWS)
def test_actions_outside_the_table_are_invalid(status: str, action: str) -> None:
    with pytest.raises(InvalidTransitionError):
        ensure_transition(_request(status, "provider"), "provider", action)


def test_unknown_action_is_invalid() -> None:
    with pytest.raises(InvalidTransitionError):
        ensure_transition(_request("requested"), "provider", "refund")


def test_customer_cannot_quote_own_request() -> None:
    with pytest.raises(ForbiddenError):
        ensure_transition(_request("requested"), "customer", "submitQuote")


def test_only_customer_accepts_quote() -> None:
    with pytest.raises(ForbiddenError):
        ensure_transition(_request("quoted", "provider"), "provider", "acceptQuote")


def test_stranger_cannot_reject_quoted_request() -> None:
    with pytest.raises(ForbiddenError):
        ensure_transition(_request("quoted", "provider"), "someone-else", "reject")


def test_only_assigned_provider_prints() -> None:
    with pytest.raises(ForbiddenError):
        ensure_transition(_request("accepted", "provider"), "customer", "startPrint")
    with pytest.raises(ForbiddenError):
        ensure_transition(_request("printing", "provider"), "other-provider", "complete")


def test_terminal_statuses_have_no_actions() -> None:
    for status in TERMINAL_REQUEST_STATUSES:
        assert allowed_actions(status) == []
    for status in ACTIVE_REQUEST_STATUSES:
        assert allowed_actions(status)
    assert ACTIVE_REQUEST_STATUSES | TERMINAL_REQUEST_STATUSES == {status.value for status in RequestStatus}
    assert set(allowed_actions("requested")) == {"submitQuote", "reject"}
