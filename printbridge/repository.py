from __future__ import annotations

import asyncio
import json
import secrets
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from printbridge.enums import RequestStatus
from printbridge.errors import ConflictError, NotFoundError
from printbridge.models import PrintRequest, RequestDraft, StatusEntry


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _build_request_id() -> str:
    return f"PR-{utcnow():%Y%m%d%H%M%S}-{secrets.token_hex(2).upper()}"


def _new_request(draft: RequestDraft) -> PrintRequest:
    now = utcnow()
    return PrintRequest(
        id=_build_request_id(),
        customer_id=draft.customer_id,
        files=list(draft.files),
        specification=draft.specification,
        status=RequestStatus.REQUESTED.value,
        created_at=now,
        updated_at=now,
        status_history=[
            StatusEntry(
                status=RequestStatus.REQUESTED.value,
                timestamp=now,
                actor_id=draft.customer_id,
            )
        ],
        estimate=draft.estimate,
        version=1,
    )


def _newest_first(requests: list[PrintRequest]) -> list[PrintRequest]:
    return sorted(requests, key=lambda item: (item.created_at, item.id), reverse=True)


class RequestRepository(Protocol):
    """Persistence port used by the lifecycle service.

    ``save`` is a full replace guarded by ``version``: it fails with
    ``ConflictError`` unless the stored version still equals
    ``request.version``, and returns the stored copy with the version bumped.
    """

    async def create(self, draft: RequestDraft) -> PrintRequest:
        ...

    async def get_by_id(self, request_id: str) -> PrintRequest:
        ...

    async def list_available(self, actor_id: str) -> list[PrintRequest]:
        ...

    async def list_for_customer(self, customer_id: str) -> list[PrintRequest]:
        ...

    async def list_for_provider(self, provider_id: str) -> list[PrintRequest]:
        ...

    async def list_by_status(self, status: str) -> list[PrintRequest]:
        ...

    async def save(self, request: PrintRequest) -> PrintRequest:
        ...


class InMemoryRequestRepository:
    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    async def _io(self) -> None:
        # reads return a snapshot taken before the round trip, like a real store
        await asyncio.sleep(0)

    async def _matching(self, predicate: Callable[[PrintRequest], bool]) -> list[PrintRequest]:
        found = [item for item in map(PrintRequest.from_dict, self._documents.values()) if predicate(item)]
        await self._io()
        return _newest_first(found)

    async def create(self, draft: RequestDraft) -> PrintRequest:
        request = _new_request(draft)
        self._documents[request.id] = request.to_dict()
        await self._io()
        return request.copy()

    async def get_by_id(self, request_id: str) -> PrintRequest:
        document = self._documents.get(request_id)
        snapshot = PrintRequest.from_dict(document) if document is not None else None
        await self._io()
        if snapshot is None:
            raise NotFoundError(request_id=request_id)
        return snapshot

    async def list_available(self, actor_id: str) -> list[PrintRequest]:
        return await self._matching(
            lambda item: item.status == RequestStatus.REQUESTED.value
            and item.provider_id is None
            and item.customer_id != actor_id
        )

    async def list_for_customer(self, customer_id: str) -> list[PrintRequest]:
        return await self._matching(lambda item: item.customer_id == customer_id)

    async def list_for_provider(self, provider_id: str) -> list[PrintRequest]:
        return await self._matching(lambda item: item.provider_id == provider_id)

    async def list_by_status(self, status: str) -> list[PrintRequest]:
        return await self._matching(lambda item: item.status == status)

    async def save(self, request: PrintRequest) -> PrintRequest:
        stored = self._documents.get(request.id)
        if stored is None:
            raise NotFoundError(request_id=request.id)
        if int(stored["version"]) != request.version:
            raise ConflictError(request_id=request.id, expected_version=request.version)
        saved = request.copy()
        saved.version = request.version + 1
        self._documents[request.id] = saved.to_dict()
        return saved.copy()


class SqliteRequestRepository:
    def __init__(self, database_path: str):
        self.database_path = database_path
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _select(self, where: str, params: tuple[Any, ...]) -> list[PrintRequest]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT document_json FROM print_requests
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                """,
                params,
            ).fetchall()
        return [PrintRequest.from_dict(json.loads(row["document_json"])) for row in rows]

    def _insert(self, draft: RequestDraft) -> PrintRequest:
        request = _new_request(draft)
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO print_requests (
                  id, customer_id, provider_id, status, material, created_at, updated_at, version, document_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    request.id,
                    request.customer_id,
                    request.provider_id,
                    request.status,
                    request.specification.material,
                    request.created_at.isoformat(),
                    request.updated_at.isoformat(),
                    request.version,
                    json.dumps(request.to_dict(), ensure_ascii=False),
                ),
            )
            conn.commit()
        return request

    def _get(self, request_id: str) -> PrintRequest:
        found = self._select("id = ?", (request_id,))
        if not found:
            raise NotFoundError(request_id=request_id)
        return found[0]

    def _replace(self, request: PrintRequest) -> PrintRequest:
        saved = request.copy()
        saved.version = request.version + 1
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE print_requests
                SET provider_id = ?,
                    status = ?,
                    material = ?,
                    created_at = ?,
                    updated_at = ?,
                    version = ?,
                    document_json = ?
                WHERE id = ? AND version = ?
                """,
                (
                    saved.provider_id,
                    saved.status,
                    saved.specification.material,
                    saved.created_at.isoformat(),
                    saved.updated_at.isoformat(),
                    saved.version,
                    json.dumps(saved.to_dict(), ensure_ascii=False),
                    request.id,
                    request.version,
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM print_requests WHERE id = ? LIMIT 1",
                    (request.id,),
                ).fetchone()
                if exists is None:
                    raise NotFoundError(request_id=request.id)
                raise ConflictError(request_id=request.id, expected_version=request.version)
        return saved

    async def create(self, draft: RequestDraft) -> PrintRequest:
        return await asyncio.to_thread(self._insert, draft)

    async def get_by_id(self, request_id: str) -> PrintRequest:
        return await asyncio.to_thread(self._get, request_id)

    async def list_available(self, actor_id: str) -> list[PrintRequest]:
        return await asyncio.to_thread(
            self._select,
            "status = ? AND provider_id IS NULL AND customer_id != ?",
            (RequestStatus.REQUESTED.value, actor_id),
        )

    async def list_for_customer(self, customer_id: str) -> list[PrintRequest]:
        return await asyncio.to_thread(self._select, "customer_id = ?", (customer_id,))

    async def list_for_provider(self, provider_id: str) -> list[PrintRequest]:
        return await asyncio.to_thread(self._select, "provider_id = ?", (provider_id,))

    async def list_by_status(self, status: str) -> list[PrintRequest]:
        return await asyncio.to_thread(self._select, "status = ?", (status,))

    async def save(self, request: PrintRequest) -> PrintRequest:
        return await asyncio.to_thread(self._replace, request)
