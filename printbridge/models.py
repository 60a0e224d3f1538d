from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(slots=True)
class FileDescriptor:
    name: str
    size: int
    mime_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "size": self.size, "mime_type": self.mime_type}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> FileDescriptor:
        return cls(name=raw["name"], size=int(raw["size"]), mime_type=raw["mime_type"])


@dataclass(slots=True)
class Specification:
    material: str
    quality: str
    quantity: int
    notes: str | None = None
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "material": self.material,
            "quality": self.quality,
            "quantity": self.quantity,
            "notes": self.notes,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Specification:
        return cls(
            material=raw["material"],
            quality=raw["quality"],
            quantity=int(raw["quantity"]),
            notes=raw.get("notes"),
            location=raw.get("location"),
        )


@dataclass(slots=True)
class Estimate:
    cost: Decimal
    timeline_days: int

    def to_dict(self) -> dict[str, Any]:
        return {"cost": str(self.cost), "timeline_days": self.timeline_days}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Estimate:
        return cls(cost=Decimal(raw["cost"]), timeline_days=int(raw["timeline_days"]))


@dataclass(slots=True)
class Quote:
    amount: Decimal
    estimated_delivery_days: int
    submitted_at: datetime
    provider_id: str
    notes: str | None = None
    estimated_completion: datetime | None = None
    accepted_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "estimated_delivery_days": self.estimated_delivery_days,
            "submitted_at": _dt(self.submitted_at),
            "provider_id": self.provider_id,
            "notes": self.notes,
            "estimated_completion": _dt(self.estimated_completion),
            "accepted_at": _dt(self.accepted_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Quote:
        return cls(
            amount=Decimal(raw["amount"]),
            estimated_delivery_days=int(raw["estimated_delivery_days"]),
            submitted_at=datetime.fromisoformat(raw["submitted_at"]),
            provider_id=raw["provider_id"],
            notes=raw.get("notes"),
            estimated_completion=_parse_dt(raw.get("estimated_completion")),
            accepted_at=_parse_dt(raw.get("accepted_at")),
        )


@dataclass(slots=True)
class PaymentRecord:
    status: str
    method: str
    amount: Decimal
    paid_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "method": self.method,
            "amount": str(self.amount),
            "paid_at": _dt(self.paid_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PaymentRecord:
        return cls(
            status=raw["status"],
            method=raw["method"],
            amount=Decimal(raw["amount"]),
            paid_at=datetime.fromisoformat(raw["paid_at"]),
        )


@dataclass(slots=True)
class StatusEntry:
    status: str
    timestamp: datetime
    actor_id: str
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": _dt(self.timestamp),
            "actor_id": self.actor_id,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StatusEntry:
        return cls(
            status=raw["status"],
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            actor_id=raw["actor_id"],
            notes=raw.get("notes"),
        )


@dataclass(slots=True)
class Review:
    rating: int
    customer_id: str
    provider_id: str | None
    created_at: datetime
    comment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rating": self.rating,
            "comment": self.comment,
            "customer_id": self.customer_id,
            "provider_id": self.provider_id,
            "created_at": _dt(self.created_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Review:
        return cls(
            rating=int(raw["rating"]),
            comment=raw.get("comment"),
            customer_id=raw["customer_id"],
            provider_id=raw.get("provider_id"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )


@dataclass(slots=True)
class RequestDraft:
    """A validated customer submission that has not been stored yet."""

    customer_id: str
    files: list[FileDescriptor]
    specification: Specification
    estimate: Estimate | None = None


@dataclass(slots=True)
class PrintRequest:
    id: str
    customer_id: str
    files: list[FileDescriptor]
    specification: Specification
    status: str
    created_at: datetime
    updated_at: datetime
    status_history: list[StatusEntry] = field(default_factory=list)
    provider_id: str | None = None
    quote: Quote | None = None
    estimate: Estimate | None = None
    payment: PaymentRecord | None = None
    review: Review | None = None
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "provider_id": self.provider_id,
            "files": [item.to_dict() for item in self.files],
            "specification": self.specification.to_dict(),
            "status": self.status,
            "quote": self.quote.to_dict() if self.quote else None,
            "estimate": self.estimate.to_dict() if self.estimate else None,
            "payment": self.payment.to_dict() if self.payment else None,
            "review": self.review.to_dict() if self.review else None,
            "status_history": [entry.to_dict() for entry in self.status_history],
            "created_at": _dt(self.created_at),
            "updated_at": _dt(self.updated_at),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PrintRequest:
        return cls(
            id=raw["id"],
            customer_id=raw["customer_id"],
            provider_id=raw.get("provider_id"),
            files=[FileDescriptor.from_dict(item) for item in raw.get("files", [])],
            specification=Specification.from_dict(raw["specification"]),
            status=raw["status"],
            quote=Quote.from_dict(raw["quote"]) if raw.get("quote") else None,
            estimate=Estimate.from_dict(raw["estimate"]) if raw.get("estimate") else None,
            payment=PaymentRecord.from_dict(raw["payment"]) if raw.get("payment") else None,
            review=Review.from_dict(raw["review"]) if raw.get("review") else None,
            status_history=[StatusEntry.from_dict(item) for item in raw.get("status_history", [])],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            version=int(raw.get("version", 1)),
        )

    def copy(self) -> PrintRequest:
        return PrintRequest.from_dict(self.to_dict())
