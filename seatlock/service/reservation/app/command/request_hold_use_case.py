from datetime import datetime, timedelta
import math
import time
from typing import List, Optional, Self, Sequence

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import ValidationError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.reservation.app.dto.hold_dto import HoldResult
from seatlock.service.reservation.app.interface.i_seat_lock_repo import ISeatLockRepo
from seatlock.service.reservation.domain.hold_conflict import (
    ConflictKind,
    HoldConflict,
    SeatConflictError,
    raise_for_conflicts,
)
from seatlock.service.reservation.domain.seat_group import SeatGroup, normalize
from seatlock.service.reservation.domain.value_object.seat_key import FULL_TABLE_SEAT, SeatKey


def generate_hold_id() -> str:
    # Time-ordered prefix plus random suffix, uppercase so it reads like the legacy ids
    return f'H{uuid_utils.uuid7().hex.upper()}'


MAX_HOLD_TTL_SECONDS = 86400


def validate_ttl(ttl_seconds: object, *, max_seconds: float = MAX_HOLD_TTL_SECONDS) -> float:
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int | float):
        raise ValidationError('ttlSec must be a positive number')
    if not math.isfinite(ttl_seconds) or ttl_seconds <= 0:
        raise ValidationError('ttlSec must be a positive number')
    if ttl_seconds > max_seconds:
        raise ValidationError(f'ttlSec must not exceed {max_seconds:g} seconds')
    return float(ttl_seconds)


class RequestHoldUseCase:
    """
    Grant or renew a temporary hold on a set of seats.

    Flow (one transaction):
    1. Normalize the request into per-table groups (full table or partial seats)
    2. Lock every affected table, sorted, so check-then-write is atomic per table
    3. Read the store clock once
    4. Collect sold conflicts (permanent allocations) and held conflicts
       (unexpired holds of a different hold id)
    5. Any conflict aborts the whole request, nothing is written
    6. Upsert one row per resolved key with the same hold id and expiry

    A caller that sends its own hold id back renews its rows instead of
    conflicting with them.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        seats_per_table: int,
        max_ttl_seconds: float = MAX_HOLD_TTL_SECONDS,
    ) -> None:
        self.uow_factory = uow_factory
        self.seats_per_table = seats_per_table
        self.max_ttl_seconds = max_ttl_seconds
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            seats_per_table=config.SEATS_PER_TABLE,
            max_ttl_seconds=config.MAX_HOLD_TTL_SECONDS,
        )

    @Logger.io
    async def execute(
        self,
        *,
        event_id: str,
        seats: Sequence[SeatKey],
        ttl_seconds: float,
        hold_id: Optional[str] = None,
    ) -> HoldResult:
        started = time.perf_counter()
        outcome = 'error'
        try:
            result = await self._request_hold(
                event_id=event_id, seats=seats, ttl_seconds=ttl_seconds, hold_id=hold_id
            )
            outcome = 'granted'
            return result
        except SeatConflictError as e:
            outcome = e.code
            raise
        except ValidationError:
            outcome = 'invalid'
            raise
        finally:
            metrics.record_hold(result=outcome, duration=time.perf_counter() - started)

    async def _request_hold(
        self,
        *,
        event_id: str,
        seats: Sequence[SeatKey],
        ttl_seconds: float,
        hold_id: Optional[str],
    ) -> HoldResult:
        if not seats:
            raise ValidationError('seats[] required')
        ttl = validate_ttl(ttl_seconds, max_seconds=self.max_ttl_seconds)
        groups = normalize(seats, seats_per_table=self.seats_per_table)
        if not groups:
            raise ValidationError('No reservable seats in request')

        hold_id = (hold_id or '').strip() or generate_hold_id()
        keys = [key for group in groups for key in group.seat_keys()]

        with self.tracer.start_as_current_span(
            'use_case.request_hold',
            attributes={
                'event.id': event_id,
                'hold.id': hold_id,
                'table.count': len(groups),
                'seat.count': len(keys),
            },
        ):
            async with self.uow_factory() as uow:
                repo = uow.seat_lock_repo
                await repo.lock_tables(
                    event_id=event_id, table_ids=[group.table_id for group in groups]
                )
                now = await repo.get_store_time()

                conflicts: List[HoldConflict] = []
                for group in groups:
                    conflicts.extend(
                        await self._find_conflicts(
                            repo=repo, event_id=event_id, group=group, hold_id=hold_id, now=now
                        )
                    )
                if conflicts:
                    Logger.base.warning(
                        f'⛔ [HOLD] {hold_id} rejected on event {event_id}: '
                        f'{len(conflicts)} conflicting keys'
                    )
                raise_for_conflicts(conflicts)

                expires_at = now + timedelta(seconds=ttl)
                await repo.upsert_holds(
                    event_id=event_id, hold_id=hold_id, keys=keys, expires_at=expires_at
                )
                await uow.commit()

        metrics.record_hold_keys(count=len(keys))
        Logger.base.info(
            f'✅ [HOLD] {hold_id} holds {len(keys)} keys on event {event_id} until {expires_at}'
        )
        return HoldResult(hold_id=hold_id, seats=keys, expires_at=expires_at)

    @staticmethod
    async def _find_conflicts(
        *,
        repo: ISeatLockRepo,
        event_id: str,
        group: SeatGroup,
        hold_id: str,
        now: datetime,
    ) -> List[HoldConflict]:
        table_id = group.table_id
        if group.is_full:
            conflicts: List[HoldConflict] = []
            sentinel = SeatKey(table_id=table_id, seat_no=FULL_TABLE_SEAT)
            if await repo.find_permanent_on_table(event_id=event_id, table_id=table_id):
                conflicts.append(HoldConflict(key=sentinel, kind=ConflictKind.SOLD))
            holds = await repo.find_active_holds_on_table(
                event_id=event_id, table_id=table_id, now=now
            )
            if any(not hold.is_owned_by(hold_id) for hold in holds):
                conflicts.append(HoldConflict(key=sentinel, kind=ConflictKind.HELD))
            return conflicts

        # Partial: the table sentinel blocks every seat of the table
        seat_nos = [FULL_TABLE_SEAT, *group.seats]
        sold = await repo.find_permanent_at(event_id=event_id, table_id=table_id, seat_nos=seat_nos)
        holds = await repo.find_active_holds_at(
            event_id=event_id, table_id=table_id, seat_nos=seat_nos, now=now
        )
        return [HoldConflict(key=key, kind=ConflictKind.SOLD) for key in sold] + [
            HoldConflict(key=hold.key, kind=ConflictKind.HELD)
            for hold in holds
            if not hold.is_owned_by(hold_id)
        ]
