"""
Seat Lock Repository Implementation (PostgreSQL)

Bound to the unit-of-work session. Serialization per table comes from
pg_advisory_xact_lock; the composite primary keys are the last line if a
writer ever skips the lock.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.reservation.app.interface.i_seat_lock_repo import ISeatLockRepo
from seatlock.service.reservation.domain.entity.seat_lock_entity import TemporaryHold
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey
from seatlock.service.reservation.driven_adapter.model.seat_lock_model import (
    DoneSeatLockModel,
    SeatLockModel,
)


class SeatLockRepoImpl(ISeatLockRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_hold(model: SeatLockModel) -> TemporaryHold:
        return TemporaryHold(
            event_id=model.event_id,
            table_id=model.table_id,
            seat_no=model.seat_no,
            hold_id=model.hold_id,
            expires_at=model.expires_at,
            created_at=model.created_at,
        )

    @Logger.io
    async def lock_tables(self, *, event_id: str, table_ids: Sequence[str]) -> None:
        for table_id in sorted(set(table_ids)):
            await self.session.execute(
                select(func.pg_advisory_xact_lock(func.hashtext(event_id), func.hashtext(table_id)))
            )

    async def get_store_time(self) -> datetime:
        result = await self.session.execute(select(func.now()))
        return result.scalar_one()

    @Logger.io
    async def sweep_expired_holds(self, *, now: datetime, event_id: Optional[str] = None) -> int:
        stmt = delete(SeatLockModel).where(SeatLockModel.expires_at < now)
        if event_id is not None:
            stmt = stmt.where(SeatLockModel.event_id == event_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def find_permanent_on_table(self, *, event_id: str, table_id: str) -> List[SeatKey]:
        result = await self.session.execute(
            select(DoneSeatLockModel.table_id, DoneSeatLockModel.seat_no)
            .where(
                DoneSeatLockModel.event_id == event_id,
                DoneSeatLockModel.table_id == table_id,
            )
            .order_by(DoneSeatLockModel.seat_no)
        )
        return [SeatKey(table_id=row.table_id, seat_no=row.seat_no) for row in result]

    async def find_permanent_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int]
    ) -> List[SeatKey]:
        result = await self.session.execute(
            select(DoneSeatLockModel.table_id, DoneSeatLockModel.seat_no)
            .where(
                DoneSeatLockModel.event_id == event_id,
                DoneSeatLockModel.table_id == table_id,
                DoneSeatLockModel.seat_no.in_(list(seat_nos)),
            )
            .order_by(DoneSeatLockModel.seat_no)
        )
        return [SeatKey(table_id=row.table_id, seat_no=row.seat_no) for row in result]

    async def find_active_holds_on_table(
        self, *, event_id: str, table_id: str, now: datetime
    ) -> List[TemporaryHold]:
        result = await self.session.execute(
            select(SeatLockModel)
            .where(
                SeatLockModel.event_id == event_id,
                SeatLockModel.table_id == table_id,
                SeatLockModel.expires_at > now,
            )
            .order_by(SeatLockModel.seat_no)
        )
        return [self._to_hold(model) for model in result.scalars()]

    async def find_active_holds_at(
        self, *, event_id: str, table_id: str, seat_nos: Sequence[int], now: datetime
    ) -> List[TemporaryHold]:
        result = await self.session.execute(
            select(SeatLockModel)
            .where(
                SeatLockModel.event_id == event_id,
                SeatLockModel.table_id == table_id,
                SeatLockModel.seat_no.in_(list(seat_nos)),
                SeatLockModel.expires_at > now,
            )
            .order_by(SeatLockModel.seat_no)
        )
        return [self._to_hold(model) for model in result.scalars()]

    @Logger.io
    async def upsert_holds(
        self, *, event_id: str, hold_id: str, keys: Sequence[SeatKey], expires_at: datetime
    ) -> None:
        if not keys:
            return
        stmt = insert(SeatLockModel).values(
            [
                {
                    'event_id': event_id,
                    'table_id': key.table_id,
                    'seat_no': key.seat_no,
                    'hold_id': hold_id,
                    'expires_at': expires_at,
                }
                for key in keys
            ]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[SeatLockModel.event_id, SeatLockModel.table_id, SeatLockModel.seat_no],
            set_={'hold_id': stmt.excluded.hold_id, 'expires_at': stmt.excluded.expires_at},
        )
        await self.session.execute(stmt)

    @Logger.io
    async def delete_holds_by_hold_id(self, *, hold_id: str) -> int:
        result = await self.session.execute(
            delete(SeatLockModel).where(SeatLockModel.hold_id == hold_id)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    @Logger.io
    async def insert_permanent_allocations(
        self, *, event_id: str, order_id: str, keys: Sequence[SeatKey]
    ) -> int:
        if not keys:
            return 0
        stmt = (
            insert(DoneSeatLockModel)
            .values(
                [
                    {
                        'event_id': event_id,
                        'order_id': order_id,
                        'table_id': key.table_id,
                        'seat_no': key.seat_no,
                    }
                    for key in keys
                ]
            )
            .on_conflict_do_nothing(
                index_elements=[
                    DoneSeatLockModel.event_id,
                    DoneSeatLockModel.table_id,
                    DoneSeatLockModel.seat_no,
                ]
            )
            .returning(DoneSeatLockModel.seat_no)
        )
        result = await self.session.execute(stmt)
        return len(result.all())

    async def list_active_hold_keys(self, *, event_id: str, now: datetime) -> List[SeatKey]:
        result = await self.session.execute(
            select(SeatLockModel.table_id, SeatLockModel.seat_no)
            .where(SeatLockModel.event_id == event_id, SeatLockModel.expires_at > now)
            .order_by(SeatLockModel.table_id, SeatLockModel.seat_no)
        )
        return [SeatKey(table_id=row.table_id, seat_no=row.seat_no) for row in result]

    async def list_permanent_keys(self, *, event_id: str) -> List[SeatKey]:
        result = await self.session.execute(
            select(DoneSeatLockModel.table_id, DoneSeatLockModel.seat_no)
            .where(DoneSeatLockModel.event_id == event_id)
            .order_by(DoneSeatLockModel.table_id, DoneSeatLockModel.seat_no)
        )
        return [SeatKey(table_id=row.table_id, seat_no=row.seat_no) for row in result]

    async def count_active_holds(self, *, now: datetime) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(SeatLockModel).where(SeatLockModel.expires_at > now)
        )
        return int(result.scalar_one())
