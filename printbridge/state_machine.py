from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from printbridge.enums import RequestAction, RequestStatus
from printbridge.errors import ForbiddenError, InvalidTransitionError

if TYPE_CHECKING:
    from printbridge.models import PrintRequest


Guard = Callable[["PrintRequest", str], str | None]


def _unassigned_and_not_owner(request: PrintRequest, actor_id: str) -> str | None:
    if request.provider_id is not None:
        return "request already has a provider"
    if actor_id == request.customer_id:
        return "customers cannot quote their own request"
    return None


def _anyone(request: PrintRequest, actor_id: str) -> str | None:
    return None


def _is_customer(request: PrintRequest, actor_id: str) -> str | None:
    if actor_id != request.customer_id:
        return "only the customer may do this"
    return None


def _is_party(request: PrintRequest, actor_id: str) -> str | None:
    if actor_id not in {request.customer_id, request.provider_id}:
        return "only the customer or the quoting provider may do this"
    return None


def _is_provider(request: PrintRequest, actor_id: str) -> str | None:
    if request.provider_id is None or actor_id != request.provider_id:
        return "only the assigned provider may do this"
    return None


@dataclass(frozen=True, slots=True)
class Transition:
    current: str
    action: str
    target: str
    guard: Guard


TRANSITIONS: dict[tuple[str, str], Transition] = {
    (t.current, t.action): t
    for t in (
        Transition(
            RequestStatus.REQUESTED.value,
            RequestAction.SUBMIT_QUOTE.value,
            RequestStatus.QUOTED.value,
            _unassigned_and_not_owner,
        ),
        Transition(
            RequestStatus.REQUESTED.value,
            RequestAction.REJECT.value,
            RequestStatus.REJECTED.value,
            _anyone,
        ),
        Transition(
            RequestStatus.QUOTED.value,
            RequestAction.ACCEPT_QUOTE.value,
            RequestStatus.ACCEPTED.value,
            _is_customer,
        ),
        Transition(
            RequestStatus.QUOTED.value,
            RequestAction.REJECT.value,
            RequestStatus.REJECTED.value,
            _is_party,
        ),
        Transition(
            RequestStatus.ACCEPTED.value,
            RequestAction.START_PRINT.value,
            RequestStatus.PRINTING.value,
            _is_provider,
        ),
        Transition(
            RequestStatus.PRINTING.value,
            RequestAction.COMPLETE.value,
            RequestStatus.COMPLETED.value,
            _is_provider,
        ),
    )
}


def allowed_actions(current: str) -> list[str]:
    return [action for (status, action) in TRANSITIONS if status == current]


def find_transition(current: str, action: str) -> Transition:
    transition = TRANSITIONS.get((current, action))
    if transition is None:
        raise InvalidTransitionError(current=current, action=action)
    return transition


def ensure_transition(request: PrintRequest, actor_id: str, action: str) -> Transition:
    """Resolve the row for ``action`` and check its guard for ``actor_id``.

    Raises ``InvalidTransitionError`` when the current status has no such
    action and ``ForbiddenError`` when the actor fails the guard.
    """
    transition = find_transition(request.status, action)
    reason = transition.guard(request, actor_id)
    if reason is not None:
        raise ForbiddenError(actor_id=actor_id, action=action, reason=reason)
    return transition
