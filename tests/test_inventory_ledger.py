"""
Tests for the seat inventory ledger, including concurrent reservations.
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from event_platform.database import DatabaseManager
from event_platform.models.event import Event
from event_platform.services.event_service import EventService
from event_platform.services.inventory_ledger import InventoryLedger
from event_platform.utils.exceptions import EventNotFoundError, ReservationMismatchError

from .factories import event_create


async def _create_event(session: AsyncSession, capacity: int = 5) -> Event:
    return await EventService(session).create_event(event_create(capacity=capacity))


async def _available(db: DatabaseManager, event_id: int) -> int:
    async with db.get_session() as session:
        event = await InventoryLedger(session).get_event(event_id)
        return event.available_seats


@pytest.mark.asyncio
async def test_reserve_takes_seats(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session)

    assert await InventoryLedger(events_session).reserve_seats(event.id, 2) is True
    assert await _available(events_db, event.id) == 3


@pytest.mark.asyncio
async def test_reserve_more_than_available_is_declined(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session, capacity=1)

    assert await InventoryLedger(events_session).reserve_seats(event.id, 2) is False
    assert await _available(events_db, event.id) == 1


@pytest.mark.asyncio
async def test_reserve_exactly_the_remaining_seats(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session, capacity=3)
    ledger = InventoryLedger(events_session)

    assert await ledger.reserve_seats(event.id, 3) is True
    assert await ledger.reserve_seats(event.id, 1) is False
    assert await _available(events_db, event.id) == 0


@pytest.mark.asyncio
async def test_reserve_unknown_event(events_session: AsyncSession):
    with pytest.raises(EventNotFoundError):
        await InventoryLedger(events_session).reserve_seats(999, 1)


@pytest.mark.asyncio
async def test_reserve_rejects_non_positive_count(events_session: AsyncSession):
    event = await _create_event(events_session)

    with pytest.raises(ValueError):
        await InventoryLedger(events_session).reserve_seats(event.id, 0)


@pytest.mark.asyncio
async def test_concurrent_reserves_never_overdraw(events_db: DatabaseManager, events_session: AsyncSession):
    """Ten concurrent single-seat reservations against five seats."""
    event = await _create_event(events_session, capacity=5)

    async def reserve_one(i: int) -> bool:
        async with events_db.get_session() as session:
            return await InventoryLedger(session).reserve_seats(event.id, 1, reference=f"concurrent-{i}")

    results = await asyncio.gather(*(reserve_one(i) for i in range(10)))

    assert results.count(True) == 5
    assert results.count(False) == 5
    assert await _available(events_db, event.id) == 0


@pytest.mark.asyncio
async def test_repeated_reference_reserves_once(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session)
    ledger = InventoryLedger(events_session)

    assert await ledger.reserve_seats(event.id, 2, reference="booking-ref-1") is True
    assert await ledger.reserve_seats(event.id, 2, reference="booking-ref-1") is True
    assert await _available(events_db, event.id) == 3


@pytest.mark.asyncio
async def test_referenced_release_is_idempotent(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session)
    ledger = InventoryLedger(events_session)
    event_id = event.id
    await ledger.reserve_seats(event_id, 2, reference="booking-ref-2")

    await ledger.release_seats(event_id, 2, reference="booking-ref-2")
    # Already released: rolled back without touching the counter
    await ledger.release_seats(event_id, 2, reference="booking-ref-2")

    assert await _available(events_db, event_id) == 5


@pytest.mark.asyncio
async def test_released_reference_cannot_be_reserved_again(events_session: AsyncSession):
    event = await _create_event(events_session)
    ledger = InventoryLedger(events_session)
    await ledger.reserve_seats(event.id, 2, reference="booking-ref-3")
    await ledger.release_seats(event.id, 2, reference="booking-ref-3")

    assert await ledger.reserve_seats(event.id, 2, reference="booking-ref-3") is False


@pytest.mark.asyncio
async def test_referenced_release_credits_reserved_amount(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session)
    ledger = InventoryLedger(events_session)
    await ledger.reserve_seats(event.id, 2, reference="booking-ref-4")

    await ledger.release_seats(event.id, 4, reference="booking-ref-4")

    assert await _available(events_db, event.id) == 5


@pytest.mark.asyncio
async def test_release_with_unknown_reference(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session)

    with pytest.raises(ReservationMismatchError):
        await InventoryLedger(events_session).release_seats(event.id, 1, reference="never-reserved")
    assert await _available(events_db, event.id) == 5


@pytest.mark.asyncio
async def test_release_reference_of_another_event(events_session: AsyncSession):
    first = await _create_event(events_session)
    second = await _create_event(events_session)
    ledger = InventoryLedger(events_session)
    await ledger.reserve_seats(first.id, 1, reference="booking-ref-5")

    with pytest.raises(ReservationMismatchError):
        await ledger.release_seats(second.id, 1, reference="booking-ref-5")


@pytest.mark.asyncio
async def test_unreferenced_release_is_not_bounded_by_capacity(events_db: DatabaseManager, events_session: AsyncSession):
    event = await _create_event(events_session, capacity=5)

    await InventoryLedger(events_session).release_seats(event.id, 2)

    assert await _available(events_db, event.id) == 7


@pytest.mark.asyncio
async def test_release_unknown_event(events_session: AsyncSession):
    with pytest.raises(EventNotFoundError):
        await InventoryLedger(events_session).release_seats(999, 1)
