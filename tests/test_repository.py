from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from printbridge.db import init_db
from printbridge.errors import ConflictError, NotFoundError
from printbridge.models import Estimate, RequestDraft
from printbridge.repository import InMemoryRequestRepository, SqliteRequestRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, settings):
    if request.param == "memory":
        return InMemoryRequestRepository()
    init_db(settings.database_path)
    return SqliteRequestRepository(settings.database_path)


def _draft(customer_id: str, files, spec) -> RequestDraft:
    return RequestDraft(
        customer_id=customer_id,
        files=files,
        specification=spec,
        estimate=Estimate(cost=Decimal("65"), timeline_days=3),
    )


def test_create_assigns_identity_and_history(repo, files, spec) -> None:
    created = asyncio.run(repo.create(_draft("C", files, spec)))

    assert created.id.startswith("PR-")
    assert created.status == "requested"
    assert created.provider_id is None
    assert created.version == 1
    assert created.created_at == created.updated_at
    assert len(created.status_history) == 1
    assert created.status_history[0].status == "requested"


def test_save_then_get_round_trip(repo, files, spec) -> None:
    async def scenario():
        created = await repo.create(_draft("C", files, spec))
        await repo.save(created)
        return created, await repo.get_by_id(created.id)

    created, fetched = asyncio.run(scenario())
    expected = created.to_dict()
    actual = fetched.to_dict()
    for key in ("updated_at", "version"):
        expected.pop(key)
        actual.pop(key)
    assert actual == expected
    assert fetched.estimate == Estimate(cost=Decimal("65"), timeline_days=3)
    assert fetched.files == files


def test_stale_version_conflicts(repo, files, spec) -> None:
    async def scenario():
        created = await repo.create(_draft("C", files, spec))
        saved = await repo.save(created)
        with pytest.raises(ConflictError):
            await repo.save(created)
        return saved, await repo.get_by_id(created.id)

    saved, stored = asyncio.run(scenario())
    assert saved.version == 2
    assert stored.version == 2


def test_missing_request_is_not_found(repo, files, spec) -> None:
    async def scenario():
        with pytest.raises(NotFoundError):
            await repo.get_by_id("PR-missing")
        ghost = await repo.create(_draft("C", files, spec))
        ghost.id = "PR-ghost"
        with pytest.raises(NotFoundError):
            await repo.save(ghost)

    asyncio.run(scenario())


def test_role_scoped_listings(repo, files, spec) -> None:
    async def scenario():
        mine = await repo.create(_draft("C", files, spec))
        other = await repo.create(_draft("D", files, spec))
        taken = await repo.create(_draft("D", files, spec))
        taken.provider_id = "P"
        taken.status = "quoted"
        await repo.save(taken)
        return (
            mine,
            other,
            taken,
            await repo.list_available("C"),
            await repo.list_available("P"),
            await repo.list_for_customer("D"),
            await repo.list_for_provider("P"),
            await repo.list_by_status("quoted"),
        )

    mine, other, taken, available_c, available_p, for_d, for_p, quoted = asyncio.run(scenario())
    assert [item.id for item in available_c] == [other.id]
    assert {item.id for item in available_p} == {mine.id, other.id}
    assert {item.id for item in for_d} == {other.id, taken.id}
    assert [item.id for item in for_p] == [taken.id]
    assert [item.id for item in quoted] == [taken.id]
