from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.reservation.app.dto.hold_dto import PromotionResult
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class PromoteHoldUseCase:
    """
    Turn a paid order into permanent allocations and free its hold.

    The tables being allocated are locked first, the same way hold requests
    lock them, so promotion and a hold check on one table never interleave.

    Seat items allocate (table, seat); whole-table items allocate the table
    sentinel (table, 0). Items missing a table, and seat items missing a seat
    number, are skipped. Inserts are insert-or-ignore, so running promotion
    twice for the same order is harmless.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, order_id: str, event_id: str) -> PromotionResult:
        async with self.uow_factory() as uow:
            result = await self.promote_within(uow, order_id=order_id, event_id=event_id)
            await uow.commit()
        return result

    async def promote_within(
        self, uow: AbstractUnitOfWork, *, order_id: str, event_id: str
    ) -> PromotionResult:
        """Promote inside the caller's unit of work; the caller commits"""
        with self.tracer.start_as_current_span(
            'use_case.promote_hold',
            attributes={'order.id': order_id, 'event.id': event_id},
        ):
            line_items = await uow.order_line_item_reader.get_line_items(order_id=order_id)

            allocated: List[SeatKey] = []
            for item in line_items:
                key = item.allocation_key()
                if key is None:
                    Logger.base.warning(
                        f'⚠️ [PROMOTE] Skipping incomplete item on {order_id}: {item}'
                    )
                    continue
                if key not in allocated:
                    allocated.append(key)

            if allocated:
                await uow.seat_lock_repo.lock_tables(
                    event_id=event_id, table_ids=[key.table_id for key in allocated]
                )
            inserted = await uow.seat_lock_repo.insert_permanent_allocations(
                event_id=event_id, order_id=order_id, keys=allocated
            )

            released = 0
            hold_id = await uow.order_line_item_reader.get_hold_id(order_id=order_id)
            if hold_id:
                released = await uow.seat_lock_repo.delete_holds_by_hold_id(hold_id=hold_id)

            metrics.record_promotion(inserted=inserted, released=released)
            Logger.base.info(
                f'🎟️ [PROMOTE] Order {order_id}: {inserted}/{len(allocated)} allocations new, '
                f'{released} hold rows released'
            )
            return PromotionResult(allocated=allocated, inserted=inserted, released=released)
