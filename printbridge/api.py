from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from printbridge.bot.texts import legacy_label, parse_status, status_label
from printbridge.enums import ACTIVE_REQUEST_STATUSES, TERMINAL_REQUEST_STATUSES
from printbridge.errors import LifecycleError
from printbridge.models import FileDescriptor, PrintRequest, Specification
from printbridge.queries import (
    count_by_status,
    filter_by_material,
    filter_by_status,
    search,
    sort_by_created_at,
    total_quoted_amount,
)
from printbridge.runtime import AppContainer
from printbridge.state_machine import allowed_actions


logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[str, int] = {
    "validation_error": 400,
    "forbidden": 403,
    "not_found": 404,
    "invalid_transition": 409,
    "conflict": 409,
    "already_reviewed": 409,
}


class FileIn(BaseModel):
    name: str
    size: int
    mime_type: str = Field(validation_alias=AliasChoices("mime_type", "mimeType"))

    def to_descriptor(self) -> FileDescriptor:
        return FileDescriptor(name=self.name, size=self.size, mime_type=self.mime_type)


class SpecificationIn(BaseModel):
    material: str
    quality: str
    quantity: int
    notes: str | None = None
    location: str | None = None

    def to_specification(self) -> Specification:
        return Specification(
            material=self.material,
            quality=self.quality,
            quantity=self.quantity,
            notes=self.notes,
            location=self.location,
        )


class SubmissionIn(BaseModel):
    files: list[FileIn] = Field(default_factory=list)
    specification: SpecificationIn


class ActionIn(BaseModel):
    action: str
    payload: dict[str, Any] = Field(default_factory=dict)


class ReviewIn(BaseModel):
    rating: Any = None
    comment: Any = None


def present(request: PrintRequest) -> dict[str, Any]:
    body = request.to_dict()
    body["status_label"] = status_label(request.status)
    body["legacy_status"] = legacy_label(request.status)
    body["allowed_actions"] = allowed_actions(request.status)
    body["is_final"] = request.status in TERMINAL_REQUEST_STATUSES
    body["review_submitted"] = request.review is not None
    return body


async def actor_header(x_actor_id: str | None = Header(default=None)) -> str:
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(status_code=401, detail="missing X-Actor-Id")
    return x_actor_id.strip()


def create_api(container: AppContainer) -> FastAPI:
    app = FastAPI(title="PrintBridge API")
    lifecycle = container.lifecycle

    @app.exception_handler(LifecycleError)
    async def lifecycle_error(request: Request, exc: LifecycleError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(exc.error_code, 400)
        logger.info("%s %s -> %s: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"error": exc.error_code, "detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "detail": str(exc.errors())},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/materials")
    async def materials() -> list[dict[str, str]]:
        return [item.to_dict() for item in container.materials.values()]

    @app.post("/estimate")
    async def estimate(body: SubmissionIn) -> dict[str, Any]:
        result = lifecycle.estimate(
            [item.to_descriptor() for item in body.files],
            body.specification.to_specification(),
        )
        return result.to_dict()

    @app.post("/requests", status_code=201)
    async def create_request(body: SubmissionIn, actor_id: str = Depends(actor_header)) -> dict[str, Any]:
        created = await lifecycle.create_request(
            customer_id=actor_id,
            files=[item.to_descriptor() for item in body.files],
            specification=body.specification.to_specification(),
        )
        return present(created)

    @app.get("/requests")
    async def list_requests(
        role: str = "customer",
        scope: str = "mine",
        material: str | None = None,
        status: str | None = None,
        q: str | None = None,
        actor_id: str = Depends(actor_header),
    ) -> list[dict[str, Any]]:
        found = await lifecycle.list_requests(actor_id=actor_id, role=role, scope=scope)
        found = filter_by_material(found, material)
        if status:
            canonical = parse_status(status)
            if canonical is None:
                raise HTTPException(status_code=400, detail=f"unknown status: {status}")
            found = filter_by_status(found, canonical)
        found = search(found, q)
        return [present(item) for item in sort_by_created_at(found)]

    @app.get("/requests/summary")
    async def summary(
        role: str = "customer",
        scope: str = "mine",
        actor_id: str = Depends(actor_header),
    ) -> dict[str, Any]:
        found = await lifecycle.list_requests(actor_id=actor_id, role=role, scope=scope)
        counts = count_by_status(found)
        return {
            "counts": counts,
            "active": sum(counts[status] for status in ACTIVE_REQUEST_STATUSES),
            "total_quoted_amount": str(total_quoted_amount(found)),
        }

    @app.get("/requests/{request_id}")
    async def get_request(request_id: str, actor_id: str = Depends(actor_header)) -> dict[str, Any]:
        return present(await lifecycle.get_visible_request(request_id, actor_id))

    @app.post("/requests/{request_id}/actions")
    async def apply_action(
        request_id: str,
        body: ActionIn,
        actor_id: str = Depends(actor_header),
    ) -> dict[str, Any]:
        updated = await lifecycle.apply_action(
            request_id=request_id,
            actor_id=actor_id,
            action=body.action,
            payload=body.payload,
        )
        return present(updated)

    @app.post("/requests/{request_id}/review", status_code=201)
    async def submit_review(
        request_id: str,
        body: ReviewIn,
        actor_id: str = Depends(actor_header),
    ) -> dict[str, Any]:
        reviewed = await lifecycle.submit_review(
            request_id=request_id,
            actor_id=actor_id,
            payload=body.model_dump(exclude_none=True),
        )
        return present(reviewed)

    @app.get("/providers/{provider_id}/reviews")
    async def provider_reviews(provider_id: str) -> list[dict[str, Any]]:
        reviewed = await lifecycle.list_provider_reviews(provider_id)
        return [{"request_id": item.id, **item.review.to_dict()} for item in reviewed]

    return app
