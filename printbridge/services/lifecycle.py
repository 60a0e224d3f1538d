from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from printbridge.bot.notifier import Notifier, TransitionEvent
from printbridge.config import Settings
from printbridge.enums import RequestAction, RequestStatus
from printbridge.errors import (
    AlreadyReviewedError,
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from printbridge.materials import Material
from printbridge.models import (
    Estimate,
    FileDescriptor,
    PrintRequest,
    Quote,
    RequestDraft,
    Review,
    Specification,
    StatusEntry,
)
from printbridge.repository import RequestRepository, utcnow
from printbridge.services.estimator import estimate_request
from printbridge.services.file_validator import (
    SubmissionValidationResult,
    validate_files,
    validate_specification,
)
from printbridge.services.payment import SimulatedPaymentService
from printbridge.state_machine import ensure_transition


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_DELIVERY_DAYS = 3650
MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 2000

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


def _first(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _raise_if_invalid(result: SubmissionValidationResult) -> None:
    if not result.is_valid:
        raise ValidationError(
            field=result.field or "request",
            code=result.error_code or "invalid",
            message=result.error_text or "",
        )


def _parse_amount(raw: Any) -> Decimal:
    if raw is None:
        raise ValidationError(field="amount", code="required")
    if isinstance(raw, bool):
        raise ValidationError(field="amount", code="type")
    try:
        amount = Decimal(str(raw))
    except InvalidOperation:
        raise ValidationError(field="amount", code="type", message=f"not a number: {raw!r}") from None
    if not amount.is_finite():
        raise ValidationError(field="amount", code="type", message="amount must be finite")
    if amount < 0:
        raise ValidationError(field="amount", code="range", message="amount must not be negative")
    try:
        rounded = amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(field="amount", code="range", message="amount is too large") from None
    if rounded != amount:
        raise ValidationError(field="amount", code="precision", message="at most two decimal places")
    return rounded


def _parse_days(raw: Any) -> int:
    if raw is None:
        raise ValidationError(field="estimated_delivery_days", code="required")
    if isinstance(raw, bool):
        raise ValidationError(field="estimated_delivery_days", code="type")
    if isinstance(raw, str):
        text = raw.strip()
        if not _INTEGER_PATTERN.fullmatch(text):
            raise ValidationError(field="estimated_delivery_days", code="type", message="must be an integer")
        raw = int(text)
    if not isinstance(raw, int):
        raise ValidationError(field="estimated_delivery_days", code="type", message="must be an integer")
    if raw < 0:
        raise ValidationError(field="estimated_delivery_days", code="range", message="must not be negative")
    if raw > MAX_DELIVERY_DAYS:
        raise ValidationError(
            field="estimated_delivery_days",
            code="range",
            message=f"must not exceed {MAX_DELIVERY_DAYS}",
        )
    return raw


def _parse_notes(payload: dict[str, Any]) -> str | None:
    notes = payload.get("notes")
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise ValidationError(field="notes", code="type", message="notes must be text")
    return notes.strip() or None


def _parse_rating(raw: Any) -> int:
    if raw is None:
        raise ValidationError(field="rating", code="required")
    if isinstance(raw, bool):
        raise ValidationError(field="rating", code="type")
    if isinstance(raw, str) and _INTEGER_PATTERN.fullmatch(raw.strip()):
        raw = int(raw.strip())
    if not isinstance(raw, int):
        raise ValidationError(field="rating", code="type", message="must be an integer")
    if not MIN_RATING <= raw <= MAX_RATING:
        raise ValidationError(
            field="rating",
            code="range",
            message=f"must be between {MIN_RATING} and {MAX_RATING}",
        )
    return raw


def _parse_comment(payload: dict[str, Any]) -> str | None:
    comment = payload.get("comment")
    if comment is None:
        return None
    if not isinstance(comment, str):
        raise ValidationError(field="comment", code="type", message="comment must be text")
    if len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            field="comment",
            code="too_long",
            message=f"at most {MAX_COMMENT_LENGTH} characters",
        )
    return comment.strip() or None


class LifecycleService:
    """The only code path that creates or mutates print requests."""

    def __init__(
        self,
        repository: RequestRepository,
        notifier: Notifier,
        payment_service: SimulatedPaymentService,
        materials: dict[str, Material],
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.notifier = notifier
        self.payment_service = payment_service
        self.materials = materials
        self.settings = settings
        self.clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    def validate_submission(self, files: list[FileDescriptor], specification: Specification) -> None:
        _raise_if_invalid(
            validate_files(
                files,
                self.settings.allowed_file_extensions,
                self.settings.max_file_size_mb * 1024 * 1024,
            )
        )
        _raise_if_invalid(validate_specification(specification, self.materials))

    def estimate(self, files: list[FileDescriptor], specification: Specification) -> Estimate:
        self.validate_submission(files, specification)
        return estimate_request(specification, files, self.materials)

    async def create_request(
        self,
        customer_id: str,
        files: list[FileDescriptor],
        specification: Specification,
    ) -> PrintRequest:
        if not customer_id:
            raise ValidationError(field="customer_id", code="required")
        estimate = self.estimate(files, specification)
        created = await self.repository.create(
            RequestDraft(
                customer_id=customer_id,
                files=files,
                specification=specification,
                estimate=estimate,
            )
        )
        logger.info("Request %s created by %s", created.id, customer_id)
        self._fire(
            TransitionEvent(
                request_id=created.id,
                old_status=None,
                new_status=created.status,
                actor_id=customer_id,
            )
        )
        return created

    async def apply_action(
        self,
        request_id: str,
        actor_id: str,
        action: str,
        payload: dict[str, Any] | None = None,
    ) -> PrintRequest:
        payload = dict(payload or {})
        try:
            return await self._attempt(request_id, actor_id, action, payload)
        except ConflictError:
            logger.warning("Conflict on %s (%s by %s), retrying once", request_id, action, actor_id)

        try:
            return await self._attempt(request_id, actor_id, action, payload)
        except (InvalidTransitionError, ForbiddenError) as exc:
            # a concurrent writer moved the request on
            raise ConflictError(request_id=request_id) from exc

    async def _attempt(
        self,
        request_id: str,
        actor_id: str,
        action: str,
        payload: dict[str, Any],
    ) -> PrintRequest:
        request = await self.repository.get_by_id(request_id)
        old_status = request.status
        transition = ensure_transition(request, actor_id, action)
        notes = _parse_notes(payload)
        now = max(self.clock(), request.updated_at)

        if action == RequestAction.SUBMIT_QUOTE.value:
            amount = _parse_amount(_first(payload, "amount"))
            days = _parse_days(_first(payload, "estimated_delivery_days", "estimatedDeliveryDays"))
            request.provider_id = actor_id
            request.quote = Quote(
                amount=amount,
                estimated_delivery_days=days,
                submitted_at=now,
                provider_id=actor_id,
                notes=notes,
                estimated_completion=now + timedelta(days=days),
            )
        elif action == RequestAction.ACCEPT_QUOTE.value:
            assert request.quote is not None
            request.payment = self.payment_service.charge(
                request_id=request.id,
                amount=request.quote.amount,
                now=now,
            )
            request.quote.accepted_at = now
        elif action == RequestAction.REJECT.value:
            if request.provider_id is None and actor_id != request.customer_id:
                request.provider_id = actor_id

        request.status = transition.target
        request.status_history.append(
            StatusEntry(status=transition.target, timestamp=now, actor_id=actor_id, notes=notes)
        )
        request.updated_at = now

        saved = await self.repository.save(request)
        logger.info("Request %s: %s -> %s by %s", saved.id, old_status, saved.status, actor_id)
        self._fire(
            TransitionEvent(
                request_id=saved.id,
                old_status=old_status,
                new_status=saved.status,
                actor_id=actor_id,
            )
        )
        return saved

    async def get_visible_request(self, request_id: str, actor_id: str) -> PrintRequest:
        request = await self.repository.get_by_id(request_id)
        if actor_id in {request.customer_id, request.provider_id}:
            return request
        if request.status == RequestStatus.REQUESTED.value and request.provider_id is None:
            return request
        raise ForbiddenError(actor_id=actor_id, action="view", reason="not a party to this request")

    async def list_requests(self, actor_id: str, role: str, scope: str) -> list[PrintRequest]:
        if scope == "available":
            return await self.repository.list_available(actor_id)
        if scope != "mine":
            raise ValidationError(field="scope", code="unknown", message="scope must be mine or available")
        if role == "customer":
            return await self.repository.list_for_customer(actor_id)
        if role == "provider":
            return await self.repository.list_for_provider(actor_id)
        raise ValidationError(field="role", code="unknown", message="role must be customer or provider")

    async def submit_review(
        self,
        request_id: str,
        actor_id: str,
        payload: dict[str, Any] | None = None,
    ) -> PrintRequest:
        payload = dict(payload or {})
        try:
            return await self._review_attempt(request_id, actor_id, payload)
        except ConflictError:
            logger.warning("Conflict on %s (review by %s), retrying once", request_id, actor_id)
        return await self._review_attempt(request_id, actor_id, payload)

    async def _review_attempt(self, request_id: str, actor_id: str, payload: dict[str, Any]) -> PrintRequest:
        request = await self.repository.get_by_id(request_id)
        if request.status != RequestStatus.COMPLETED.value:
            raise InvalidTransitionError(current=request.status, action="review")
        if actor_id != request.customer_id:
            raise ForbiddenError(
                actor_id=actor_id,
                action="review",
                reason="only the customer reviews a request",
            )
        if request.review is not None:
            raise AlreadyReviewedError(request_id=request.id)

        now = max(self.clock(), request.updated_at)
        request.review = Review(
            rating=_parse_rating(_first(payload, "rating")),
            comment=_parse_comment(payload),
            customer_id=actor_id,
            provider_id=request.provider_id,
            created_at=now,
        )
        request.updated_at = now

        saved = await self.repository.save(request)
        logger.info("Request %s reviewed by %s (%s/5)", saved.id, actor_id, request.review.rating)
        return saved

    async def list_provider_reviews(self, provider_id: str) -> list[PrintRequest]:
        requests = await self.repository.list_for_provider(provider_id)
        return [item for item in requests if item.review is not None]

    def _fire(self, event: TransitionEvent) -> None:
        task = asyncio.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: TransitionEvent) -> None:
        try:
            await self.notifier.notify(event)
        except Exception:
            logger.exception("Notification failed for %s (%s)", event.request_id, event.new_status)

    async def wait_for_notifications(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))
