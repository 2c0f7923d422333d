"""
Integration tests for the seat lock engine on PostgreSQL

Runs the use cases over SqlAlchemyUnitOfWork against a migrated database:
advisory table locks, the database clock and the composite primary keys
are all real here.

Enable with SEATLOCK_INTEGRATION=1 (POSTGRES_* settings point at the database).
"""

import asyncio
from collections.abc import AsyncGenerator, Callable
import os

from alembic import command
from alembic.config import Config
import pytest
import pytest_asyncio
from sqlalchemy import text

from seatlock.platform.constant.path import BASE_DIR
from seatlock.platform.database.orm_db_setting import Database, dispose_engine
from seatlock.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from seatlock.service.reservation.domain.hold_conflict import SeatsHeldError, SeatsSoldError
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get('SEATLOCK_INTEGRATION'),
        reason='needs PostgreSQL, set SEATLOCK_INTEGRATION=1',
    ),
]

EVENT_ID = 'it-event'


@pytest.fixture(scope='module')
def migrated_database() -> None:
    command.upgrade(Config(str(BASE_DIR / 'alembic.ini')), 'head')


@pytest_asyncio.fixture
async def uow_factory(
    migrated_database: None,
) -> AsyncGenerator[Callable[[], SqlAlchemyUnitOfWork], None]:
    database = Database()
    async with database.session() as session:
        await session.execute(
            text('TRUNCATE seat_locks, done_seatlocks, tickets, order_items, orders')
        )
        await session.commit()

    yield lambda: SqlAlchemyUnitOfWork(database=database)

    await dispose_engine()


async def allocate(uow_factory, *, table_id: str, seat_no: int) -> None:
    async with uow_factory() as uow:
        await uow.seat_lock_repo.insert_permanent_allocations(
            event_id=EVENT_ID,
            order_id='order-it',
            keys=[SeatKey(table_id=table_id, seat_no=seat_no)],
        )
        await uow.commit()


@pytest.mark.asyncio
async def test_hold_conflict_and_renewal(request_hold) -> None:
    granted = await request_hold.execute(
        event_id=EVENT_ID,
        seats=[SeatKey(table_id='A', seat_no=1), SeatKey(table_id='A', seat_no=2)],
        ttl_seconds=600,
        hold_id='H1',
    )
    assert granted.seats == [SeatKey(table_id='A', seat_no=1), SeatKey(table_id='A', seat_no=2)]

    with pytest.raises(SeatsHeldError) as exc_info:
        await request_hold.execute(
            event_id=EVENT_ID,
            seats=[SeatKey(table_id='A', seat_no=2), SeatKey(table_id='A', seat_no=3)],
            ttl_seconds=600,
            hold_id='H2',
        )
    assert [conflict.key for conflict in exc_info.value.conflicts] == [
        SeatKey(table_id='A', seat_no=2)
    ]

    renewed = await request_hold.execute(
        event_id=EVENT_ID,
        seats=[SeatKey(table_id='A', seat_no=1), SeatKey(table_id='A', seat_no=2)],
        ttl_seconds=900,
        hold_id='H1',
    )
    assert renewed.expires_at > granted.expires_at


@pytest.mark.asyncio
async def test_full_table_round_trip(request_hold, list_active_locks) -> None:
    await request_hold.execute(
        event_id=EVENT_ID,
        seats=[SeatKey(table_id='B', seat_no=seat_no) for seat_no in range(1, 11)],
        ttl_seconds=600,
        hold_id='H3',
    )

    locks = await list_active_locks.execute(event_id=EVENT_ID)

    assert locks == [SeatKey(table_id='B', seat_no=seat_no) for seat_no in range(1, 11)]


@pytest.mark.asyncio
async def test_full_table_blocked_by_sold_seat(request_hold, uow_factory) -> None:
    await allocate(uow_factory, table_id='C', seat_no=4)

    with pytest.raises(SeatsSoldError) as exc_info:
        await request_hold.execute(
            event_id=EVENT_ID, seats=[SeatKey(table_id='C', seat_no=0)], ttl_seconds=600
        )

    assert [conflict.key for conflict in exc_info.value.conflicts] == [
        SeatKey(table_id='C', seat_no=0)
    ]


@pytest.mark.asyncio
async def test_expired_hold_is_swept(request_hold, list_active_locks, uow_factory) -> None:
    await request_hold.execute(
        event_id=EVENT_ID, seats=[SeatKey(table_id='D', seat_no=1)], ttl_seconds=0.2
    )
    await asyncio.sleep(0.5)

    assert await list_active_locks.execute(event_id=EVENT_ID) == []
    async with uow_factory() as uow:
        now = await uow.seat_lock_repo.get_store_time()
        assert await uow.seat_lock_repo.count_active_holds(now=now) == 0


@pytest.mark.asyncio
async def test_concurrent_requests_have_exactly_one_winner(request_hold) -> None:
    outcomes = await asyncio.gather(
        *[
            request_hold.execute(
                event_id=EVENT_ID,
                seats=[SeatKey(table_id='E', seat_no=5)],
                ttl_seconds=600,
                hold_id=f'RACE-{n}',
            )
            for n in range(2)
        ],
        return_exceptions=True,
    )

    winners = [outcome for outcome in outcomes if not isinstance(outcome, Exception)]
    losers = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], SeatsHeldError)


@pytest.mark.asyncio
async def test_duplicate_allocation_is_ignored(uow_factory) -> None:
    key = SeatKey(table_id='F', seat_no=2)

    async with uow_factory() as uow:
        first = await uow.seat_lock_repo.insert_permanent_allocations(
            event_id=EVENT_ID, order_id='order-1', keys=[key]
        )
        second = await uow.seat_lock_repo.insert_permanent_allocations(
            event_id=EVENT_ID, order_id='order-2', keys=[key]
        )
        await uow.commit()

    assert (first, second) == (1, 0)


@pytest.mark.asyncio
async def test_release(request_hold, release_hold, list_active_locks) -> None:
    await request_hold.execute(
        event_id=EVENT_ID,
        seats=[SeatKey(table_id='G', seat_no=1), SeatKey(table_id='H', seat_no=0)],
        ttl_seconds=600,
        hold_id='H-REL',
    )

    assert await release_hold.execute(hold_id='H-REL') == 2
    assert await list_active_locks.execute(event_id=EVENT_ID) == []
