from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.reservation.domain.seat_group import expand
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class ListActiveLocksUseCase:
    """
    Seat map view: every seat currently held or sold for an event.

    Expired holds are swept first (lazy expiry), in the same unit of work as
    the read. Full-table rows are expanded to one entry per seat.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, seats_per_table: int) -> None:
        self.uow_factory = uow_factory
        self.seats_per_table = seats_per_table
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow_factory=uow_factory, seats_per_table=config.SEATS_PER_TABLE)

    @Logger.io(truncate_content=True)
    async def execute(self, *, event_id: str) -> List[SeatKey]:
        with self.tracer.start_as_current_span(
            'use_case.list_active_locks', attributes={'event.id': event_id}
        ):
            async with self.uow_factory() as uow:
                repo = uow.seat_lock_repo
                now = await repo.get_store_time()
                swept = await repo.sweep_expired_holds(now=now)
                held = await repo.list_active_hold_keys(event_id=event_id, now=now)
                sold = await repo.list_permanent_keys(event_id=event_id)
                await uow.commit()

            if swept:
                Logger.base.info(f'🧹 [SWEEP] Removed {swept} expired hold rows')
            metrics.record_sweep(deleted=swept)

            held_seats = set(expand(held, seats_per_table=self.seats_per_table))
            sold_seats = set(expand(sold, seats_per_table=self.seats_per_table))
            return sorted([*held_seats, *sold_seats])

    async def count_active_holds(self) -> int:
        async with self.uow_factory() as uow:
            now = await uow.seat_lock_repo.get_store_time()
            count = await uow.seat_lock_repo.count_active_holds(now=now)
        metrics.set_active_holds(count=count)
        return count
