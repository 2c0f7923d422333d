"""
In-memory store for unit tests

Honours the repository interfaces closely enough to exercise the use cases:
- per-table asyncio locks held until the unit of work ends (advisory lock stand-in)
- a controllable store clock
- an undo log so leaving a unit of work without commit rolls every write back
- optional failure injection per repository method
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

import attrs

from seatlock.platform.database.unit_of_work import AbstractUnitOfWork
from seatlock.platform.exception.exceptions import StoreError
from seatlock.service.order.app.interface.i_order_repo import IOrderRepo
from seatlock.service.order.app.interface.i_ticket_repo import ITicketRepo
from seatlock.service.order.domain.entity.order_entity import Order
from seatlock.service.order.domain.entity.ticket_entity import Ticket
from seatlock.service.reservation.app.interface.i_seat_lock_repo import ISeatLockRepo
from seatlock.service.reservation.domain.entity.order_line_item import OrderLineItem
from seatlock.service.reservation.domain.entity.seat_lock_entity import (
    PermanentAllocation,
    TemporaryHold,
)
from seatlock.service.reservation.domain.value_object.seat_key import FULL_TABLE_SEAT, SeatKey


RowKey = Tuple[str, str, int]


def _clone_order(order: Order) -> Order:
    return attrs.evolve(
        order,
        customer=attrs.evolve(order.customer),
        items=[attrs.evolve(item) for item in order.items],
    )


class InMemoryStore:
    def __init__(self, *, now: Optional[datetime] = None) -> None:
        self.now = now or datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
        self.holds: Dict[RowKey, TemporaryHold] = {}
        self.done: Dict[RowKey, PermanentAllocation] = {}
        self.orders: Dict[str, Order] = {}
        self.tickets: Dict[str, Ticket] = {}
        self.table_locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self.order_locks: Dict[str, asyncio.Lock] = {}
        self.fail_on: Set[str] = set()
        self.commits = 0
        self.rollbacks = 0

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)

    def check_failure(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(f'injected failure in {operation}')

    # Test helpers writing committed state directly

    def seed_hold(
        self,
        *,
        table_id: str,
        seat_no: int,
        hold_id: str,
        ttl_seconds: float = 600,
        event_id: str = 'default',
    ) -> None:
        self.holds[(event_id, table_id, seat_no)] = TemporaryHold(
            event_id=event_id,
            table_id=table_id,
            seat_no=seat_no,
            hold_id=hold_id,
            expires_at=self.now + timedelta(seconds=ttl_seconds),
            created_at=self.now,
        )

    def seed_sold(
        self, *, table_id: str, seat_no: int, order_id: str = 'order-0', event_id: str = 'default'
    ) -> None:
        self.done[(event_id, table_id, seat_no)] = PermanentAllocation(
            event_id=event_id, order_id=order_id, table_id=table_id, seat_no=seat_no
        )

    def hold_rows(self, event_id: str = 'default') -> List[TemporaryHold]:
        return sorted(
            (hold for hold in self.holds.values() if hold.event_id == event_id),
            key=lambda hold: (hold.table_id, hold.seat_no),
        )


class InMemorySeatLockRepo(ISeatLockRepo):
    def __init__(self, *, store: InMemoryStore, uow: 'InMemoryUnitOfWork') -> None:
        self.store = store
        self.uow = uow

    async def lock_tables(self, *, event_id: str, table_ids: Sequence[str]) -> None:
        for table_id in sorted(set(table_ids)):
            lock = self.store.table_locks.setdefault((event_id, table_id), asyncio.Lock())
            # Advisory xact locks are re-entrant within one transaction
            if lock in self.uow.held_locks:
                continue
            await lock.acquire()
            self.uow.held_locks.append(lock)

    async def get_store_time(self) -> datetime:
        self.store.check_failure('get_store_time')
        return self.store.now

    async def sweep_expired_holds(self, *, now: datetime, event_id: Optional[str] = None) -> int:
        expired = [
            key
            for key, hold in self.store.holds.items()
            if hold.expires_at < now and (event_id is None or hold.event_id == event_id)
        ]
        for key in expired:
            self.uow.remove(self.store.holds, key)
        return len(expired)

    async def find_permanent_on_table(self, *, event_id: str, table_id: str) -> List[SeatKey]:
        await asyncio.sleep(0)
        return sorted(
            row.key
            for row in self.store.done.values()
            if row.event_id == event_id and row.table_id == table_id
        )

    async def find_permanent_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int]
    ) -> List[SeatKey]:
        await asyncio.sleep(0)
        return sorted(
            row.key
            for row in self.store.done.values()
            if row.event_id == event_id and row.table_id == table_id and row.seat_no in seat_nos
        )

    async def find_active_holds_on_table(
        self, *, event_id: str, table_id: str, now: datetime
    ) -> List[TemporaryHold]:
        await asyncio.sleep(0)
        return [
            hold
            for hold in self.store.hold_rows(event_id)
            if hold.table_id == table_id and hold.is_active(now)
        ]

    async def find_active_holds_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int], now: datetime
    ) -> List[TemporaryHold]:
        await asyncio.sleep(0)
        return [
            hold
            for hold in self.store.hold_rows(event_id)
            if hold.table_id == table_id and hold.seat_no in seat_nos and hold.is_active(now)
        ]

    async def upsert_holds(
        self, *, event_id: str, hold_id: str, keys: Sequence[SeatKey], expires_at: datetime
    ) -> None:
        self.store.check_failure('upsert_holds')
        for key in keys:
            self.uow.put(
                self.store.holds,
                (event_id, key.table_id, key.seat_no),
                TemporaryHold(
                    event_id=event_id,
                    table_id=key.table_id,
                    seat_no=key.seat_no,
                    hold_id=hold_id,
                    expires_at=expires_at,
                    created_at=self.store.now,
                ),
            )

    async def delete_holds_by_hold_id(self, *, hold_id: str) -> int:
        self.store.check_failure('delete_holds_by_hold_id')
        matching = [key for key, hold in self.store.holds.items() if hold.hold_id == hold_id]
        for key in matching:
            self.uow.remove(self.store.holds, key)
        return len(matching)

    async def insert_permanent_allocations(
        self, *, event_id: str, order_id: str, keys: Sequence[SeatKey]
    ) -> int:
        self.store.check_failure('insert_permanent_allocations')
        inserted = 0
        for key in keys:
            row_key = (event_id, key.table_id, key.seat_no)
            if row_key in self.store.done:
                continue
            self.uow.put(
                self.store.done,
                row_key,
                PermanentAllocation(
                    event_id=event_id, order_id=order_id, table_id=key.table_id, seat_no=key.seat_no
                ),
            )
            inserted += 1
        return inserted

    async def list_active_hold_keys(self, *, event_id: str, now: datetime) -> List[SeatKey]:
        return [hold.key for hold in self.store.hold_rows(event_id) if hold.is_active(now)]

    async def list_permanent_keys(self, *, event_id: str) -> List[SeatKey]:
        return sorted(row.key for row in self.store.done.values() if row.event_id == event_id)

    async def count_active_holds(self, *, now: datetime) -> int:
        self.store.check_failure('count_active_holds')
        return sum(1 for hold in self.store.holds.values() if hold.is_active(now))


class InMemoryOrderRepo(IOrderRepo):
    def __init__(self, *, store: InMemoryStore, uow: 'InMemoryUnitOfWork') -> None:
        self.store = store
        self.uow = uow

    def _find_by_id(self, order_id: str) -> Optional[Order]:
        for order in self.store.orders.values():
            if str(order.id) == order_id:
                return order
        return None

    async def get_by_ref(self, *, order_ref: str, for_update: bool = False) -> Optional[Order]:
        if for_update:
            lock = self.store.order_locks.setdefault(order_ref, asyncio.Lock())
            await lock.acquire()
            self.uow.held_locks.append(lock)
        order = self.store.orders.get(order_ref)
        return _clone_order(order) if order else None

    async def upsert(self, *, order: Order) -> Order:
        self.store.check_failure('upsert_order')
        self.uow.put(self.store.orders, order.order_ref, _clone_order(order))
        return order

    async def update_status(self, *, order: Order) -> Order:
        self.store.check_failure('update_status')
        self.uow.put(self.store.orders, order.order_ref, _clone_order(order))
        return order

    async def get_line_items(self, *, order_id: str) -> List[OrderLineItem]:
        order = self._find_by_id(order_id)
        return [item.to_line_item() for item in order.items] if order else []

    async def get_hold_id(self, *, order_id: str) -> Optional[str]:
        order = self._find_by_id(order_id)
        return order.hold_id if order else None


class InMemoryTicketRepo(ITicketRepo):
    def __init__(self, *, store: InMemoryStore, uow: 'InMemoryUnitOfWork') -> None:
        self.store = store
        self.uow = uow

    async def insert_tickets(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        self.store.check_failure('insert_tickets')
        stored = [attrs.evolve(ticket, created_at=self.store.now) for ticket in tickets]
        for ticket in stored:
            self.uow.put(self.store.tickets, ticket.code, ticket)
        return stored

    async def list_by_order(self, *, order_id: str) -> List[Ticket]:
        return sorted(
            (ticket for ticket in self.store.tickets.values() if ticket.order_id == order_id),
            key=lambda ticket: (ticket.table_id, ticket.seat_no),
        )


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, *, store: InMemoryStore) -> None:
        self.store = store
        self.held_locks: List[asyncio.Lock] = []
        self._undo: List[Callable[[], None]] = []
        self.seat_lock_repo = InMemorySeatLockRepo(store=store, uow=self)
        self.order_repo = InMemoryOrderRepo(store=store, uow=self)
        self.ticket_repo = InMemoryTicketRepo(store=store, uow=self)
        self.order_line_item_reader = self.order_repo

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            for lock in reversed(self.held_locks):
                lock.release()
            self.held_locks.clear()

    def put(self, table: Dict[Any, Any], key: Any, value: Any) -> None:
        if key in table:
            previous = table[key]
            self._undo.append(lambda: table.__setitem__(key, previous))
        else:
            self._undo.append(lambda: table.pop(key, None))
        table[key] = value

    def remove(self, table: Dict[Any, Any], key: Any) -> None:
        previous = table.pop(key)
        self._undo.append(lambda: table.__setitem__(key, previous))

    async def _commit(self) -> None:
        self.store.check_failure('commit')
        self._undo.clear()
        self.store.commits += 1

    async def rollback(self) -> None:
        if self._undo:
            self.store.rollbacks += 1
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()


def full_table(table_id: str) -> SeatKey:
    return SeatKey(table_id=table_id, seat_no=FULL_TABLE_SEAT)
