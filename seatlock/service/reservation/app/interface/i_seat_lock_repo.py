"""
Seat Lock Repository Interface

Access to temporary holds (seat_locks) and permanent allocations
(done_seatlocks). Implementations are bound to the unit-of-work session, so
every call of one use case shares a single transaction and never commits.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from seatlock.service.reservation.domain.entity.seat_lock_entity import TemporaryHold
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class ISeatLockRepo(ABC):
    @abstractmethod
    async def lock_tables(self, *, event_id: str, table_ids: Sequence[str]) -> None:
        """
        Take a transaction-scoped exclusive lock per (event_id, table_id).

        Locks are acquired in sorted order so two requests spanning the same
        tables cannot deadlock. Released on commit or rollback.
        """

    @abstractmethod
    async def get_store_time(self) -> datetime:
        """Store clock; constant for the rest of the transaction"""

    @abstractmethod
    async def sweep_expired_holds(self, *, now: datetime, event_id: Optional[str] = None) -> int:
        """Delete holds with expires_at < now, returns deleted row count"""

    @abstractmethod
    async def find_permanent_on_table(self, *, event_id: str, table_id: str) -> List[SeatKey]:
        pass

    @abstractmethod
    async def find_permanent_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int]
    ) -> List[SeatKey]:
        pass

    @abstractmethod
    async def find_active_holds_on_table(
        self, *, event_id: str, table_id: str, now: datetime
    ) -> List[TemporaryHold]:
        pass

    @abstractmethod
    async def find_active_holds_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int], now: datetime
    ) -> List[TemporaryHold]:
        pass

    @abstractmethod
    async def upsert_holds(
        self, *, event_id: str, hold_id: str, keys: Sequence[SeatKey], expires_at: datetime
    ) -> None:
        """Insert hold rows; an existing key gets the new hold_id and expires_at"""

    @abstractmethod
    async def delete_holds_by_hold_id(self, *, hold_id: str) -> int:
        pass

    @abstractmethod
    async def insert_permanent_allocations(
        self, *, event_id: str, order_id: str, keys: Sequence[SeatKey]
    ) -> int:
        """Insert-or-ignore; returns how many keys were newly allocated"""

    @abstractmethod
    async def list_active_hold_keys(self, *, event_id: str, now: datetime) -> List[SeatKey]:
        pass

    @abstractmethod
    async def list_permanent_keys(self, *, event_id: str) -> List[SeatKey]:
        pass

    @abstractmethod
    async def count_active_holds(self, *, now: datetime) -> int:
        pass
