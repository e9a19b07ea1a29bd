"""Registry Service - write-through persistence around the core state machine.

Invariants:
    - Startup on an empty DB installs and persists the bootstrap registrar
    - Every successful transition is persisted with its events in one commit
    - Domain errors persist nothing
    - A failed commit restores the core to its pre-call state
    - Any failure, cancellation included, leaves no pending events behind
    - Readers never see a write whose commit is still pending
    - Reloading from the DB reproduces parcels, histories and registrars
"""

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from land_registry.core.errors import (
    DatabaseError, EncumberedError, NotOwnerError, UnauthorizedError,
)
from land_registry.core.registry_state import Boundaries
from land_registry.models.parcel import Parcel
from land_registry.models.registrar import Registrar
from land_registry.models.registry_event import RegistryEventRecord
from land_registry.models.sale_transaction import SaleTransactionRecord
from land_registry.services.registry_service import RegistryService
from land_registry.services.registry_store import RegistryStore
from tests.services.registry_helpers import REGISTRAR

HASH_A = "aa" * 32
HASH_B = "bb" * 32


async def _register(service, db, plot_id=1, owner="alice"):
    return await service.register_parcel(
        db, REGISTRAR, plot_id, Boundaries(east="river"), 1000, 500, owner,
        HASH_A, HASH_B,
    )


async def _event_rows(session_factory) -> list[RegistryEventRecord]:
    async with session_factory() as db:
        result = await db.execute(
            select(RegistryEventRecord).order_by(RegistryEventRecord.id),
        )
        return list(result.scalars().all())


async def test_load_installs_bootstrap_registrar(registry_service, test_db):
    assert registry_service.is_registrar(REGISTRAR)
    rows = (await test_db.execute(select(Registrar.identity))).scalars().all()
    assert list(rows) == [REGISTRAR]


async def test_load_twice_does_not_duplicate_registrar(
    registry_service, test_session_factory, clock,
):
    async with test_session_factory() as db:
        reloaded = await RegistryService.load(db, REGISTRAR, clock)
    assert reloaded.list_registrars() == [REGISTRAR]


async def test_register_persists_parcel_and_event(
    registry_service, test_session_factory,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    async with test_session_factory() as db:
        parcel = await db.get(Parcel, 1)
        assert parcel.current_owner == "alice"
        assert parcel.boundary_east == "river"
        assert parcel.is_mutation_complete is False

    events = await _event_rows(test_session_factory)
    assert [(e.event_type, e.payload) for e in events] == [
        ("PropertyRegistered", {"plot_id": 1, "owner": "alice"}),
    ]


async def test_transfer_persists_sale_with_sequence(
    registry_service, test_session_factory,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)
        await registry_service.transfer_parcel(db, "alice", 1, "bob", 2000)
        await registry_service.transfer_parcel(db, "bob", 1, "carol", 3000)

    async with test_session_factory() as db:
        rows = (await db.execute(
            select(SaleTransactionRecord).order_by(SaleTransactionRecord.sequence),
        )).scalars().all()
        assert [(r.sequence, r.seller, r.buyer, r.sale_price) for r in rows] == [
            (0, "alice", "bob", 2000), (1, "bob", "carol", 3000),
        ]
        parcel = await db.get(Parcel, 1)
        assert parcel.current_owner == "carol"

    events = await _event_rows(test_session_factory)
    assert [e.event_type for e in events] == [
        "PropertyRegistered", "PropertyTransferred", "PropertyTransferred",
    ]
    assert events[1].payload == {"plot_id": 1, "from": "alice", "to": "bob", "price": 2000}


async def test_duplicate_encumbrance_writes_one_event(
    registry_service, test_session_factory,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)
        assert await registry_service.set_encumbrance(db, REGISTRAR, 1, True) is True
        assert await registry_service.set_encumbrance(db, REGISTRAR, 1, True) is False

    events = await _event_rows(test_session_factory)
    assert [e.event_type for e in events] == ["PropertyRegistered", "EncumbranceUpdated"]
    async with test_session_factory() as db:
        assert (await db.get(Parcel, 1)).is_encumbered is True


async def test_complete_mutation_persists_every_call(
    registry_service, test_session_factory,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)
        await registry_service.complete_mutation(db, REGISTRAR, 1)
        await registry_service.complete_mutation(db, REGISTRAR, 1)

    events = await _event_rows(test_session_factory)
    assert [e.event_type for e in events].count("MutationStatusUpdated") == 2


async def test_domain_errors_persist_nothing(registry_service, test_session_factory):
    async with test_session_factory() as db:
        await _register(registry_service, db)
        await registry_service.set_encumbrance(db, REGISTRAR, 1, True)
        with pytest.raises(EncumberedError):
            await registry_service.transfer_parcel(db, "alice", 1, "bob", 1)
        with pytest.raises(NotOwnerError):
            await registry_service.transfer_parcel(db, "bob", 1, "bob", 1)
        with pytest.raises(UnauthorizedError):
            await registry_service.add_registrar(db, "alice", "alice")

    async with test_session_factory() as db:
        sales = (await db.execute(select(SaleTransactionRecord))).scalars().all()
        assert sales == []
        registrars = (await db.execute(select(Registrar.identity))).scalars().all()
        assert list(registrars) == [REGISTRAR]
    assert len(await _event_rows(test_session_factory)) == 2


async def test_add_registrar_persists_once(registry_service, test_session_factory):
    async with test_session_factory() as db:
        assert await registry_service.add_registrar(db, REGISTRAR, "deputy") is True
        assert await registry_service.add_registrar(db, REGISTRAR, "deputy") is False

    async with test_session_factory() as db:
        rows = (await db.execute(
            select(Registrar.identity).order_by(Registrar.identity),
        )).scalars().all()
        assert list(rows) == ["deputy", REGISTRAR]


async def test_failed_commit_restores_core(
    registry_service, test_session_factory, monkeypatch,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    async def broken_append_event(self, event):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(RegistryStore, "append_event", broken_append_event)

    async with test_session_factory() as db:
        with pytest.raises(DatabaseError):
            await registry_service.transfer_parcel(db, "alice", 1, "bob", 2000)

    assert registry_service.get_property(1).current_owner == "alice"
    assert registry_service.get_history(1) == ()
    assert len(registry_service._outbox) == 0

    async with test_session_factory() as db:
        assert (await db.get(Parcel, 1)).current_owner == "alice"
        assert (await db.execute(select(SaleTransactionRecord))).scalars().all() == []


async def test_reload_reproduces_state(registry_service, test_session_factory, clock):
    async with test_session_factory() as db:
        await _register(registry_service, db, plot_id=0, owner="zero")
        await _register(registry_service, db, plot_id=1)
        await registry_service.transfer_parcel(db, "alice", 1, "bob", 2000)
        await registry_service.complete_mutation(db, REGISTRAR, 1)
        await registry_service.set_encumbrance(db, REGISTRAR, 0, True)
        await registry_service.add_registrar(db, REGISTRAR, "deputy")

    async with test_session_factory() as db:
        reloaded = await RegistryService.load(db, REGISTRAR, clock)

    for plot_id in (0, 1):
        assert reloaded.get_property(plot_id) == registry_service.get_property(plot_id)
        assert reloaded.get_history(plot_id) == registry_service.get_history(plot_id)
    assert reloaded.list_registrars() == ["deputy", REGISTRAR]
    assert reloaded.get_property(1).is_mutation_complete is True
    assert reloaded.get_property(0).is_encumbered is True


async def test_unexpected_persist_error_leaves_no_trace(
    registry_service, test_session_factory, monkeypatch,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    async def broken_append_sale(self, plot_id, sequence, sale):
        raise RuntimeError("serializer bug")

    monkeypatch.setattr(RegistryStore, "append_sale", broken_append_sale)
    async with test_session_factory() as db:
        with pytest.raises(RuntimeError):
            await registry_service.transfer_parcel(db, "alice", 1, "bob", 5)

    assert registry_service.get_property(1).current_owner == "alice"
    assert registry_service.get_history(1) == ()
    assert len(registry_service._outbox) == 0

    # next successful write must not carry the abandoned transfer's event
    monkeypatch.undo()
    async with test_session_factory() as db:
        await registry_service.set_encumbrance(db, REGISTRAR, 1, True)
        assert (await db.get(Parcel, 1)).current_owner == "alice"

    events = await _event_rows(test_session_factory)
    assert [e.event_type for e in events] == ["PropertyRegistered", "EncumbranceUpdated"]


async def test_cancelled_write_is_abandoned(
    registry_service, test_session_factory, monkeypatch,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    entered = asyncio.Event()

    async def hanging_append_sale(self, plot_id, sequence, sale):
        entered.set()
        await asyncio.Event().wait()

    monkeypatch.setattr(RegistryStore, "append_sale", hanging_append_sale)
    async with test_session_factory() as db:
        task = asyncio.create_task(
            registry_service.transfer_parcel(db, "alice", 1, "bob", 2000),
        )
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert registry_service.get_property(1).current_owner == "alice"
    assert registry_service.get_history(1) == ()
    assert len(registry_service._outbox) == 0

    # the write lock was released and later writes persist normally
    monkeypatch.undo()
    async with test_session_factory() as db:
        await registry_service.transfer_parcel(db, "alice", 1, "carol", 3000)

    events = await _event_rows(test_session_factory)
    assert [e.event_type for e in events] == ["PropertyRegistered", "PropertyTransferred"]
    assert events[1].payload["to"] == "carol"


async def test_readers_see_only_committed_state(
    registry_service, test_session_factory, monkeypatch,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    entered, release = asyncio.Event(), asyncio.Event()
    original_append_sale = RegistryStore.append_sale

    async def gated_append_sale(self, plot_id, sequence, sale):
        entered.set()
        await release.wait()
        await original_append_sale(self, plot_id, sequence, sale)

    monkeypatch.setattr(RegistryStore, "append_sale", gated_append_sale)
    async with test_session_factory() as db:
        task = asyncio.create_task(
            registry_service.transfer_parcel(db, "alice", 1, "bob", 2000),
        )
        await entered.wait()

        assert registry_service.get_property(1).current_owner == "alice"
        assert registry_service.get_history(1) == ()

        release.set()
        await task

    assert registry_service.get_property(1).current_owner == "bob"
    assert len(registry_service.get_history(1)) == 1


async def test_readers_never_see_a_write_that_fails_to_commit(
    registry_service, test_session_factory, monkeypatch,
):
    async with test_session_factory() as db:
        await _register(registry_service, db)

    entered, release = asyncio.Event(), asyncio.Event()

    async def failing_append_sale(self, plot_id, sequence, sale):
        entered.set()
        await release.wait()
        raise OperationalError("INSERT", {}, Exception("connection lost"))

    monkeypatch.setattr(RegistryStore, "append_sale", failing_append_sale)
    async with test_session_factory() as db:
        task = asyncio.create_task(
            registry_service.transfer_parcel(db, "alice", 1, "bob", 2000),
        )
        await entered.wait()
        assert registry_service.get_property(1).current_owner == "alice"

        release.set()
        with pytest.raises(DatabaseError):
            await task

    assert registry_service.get_property(1).current_owner == "alice"
    assert registry_service.get_history(1) == ()
