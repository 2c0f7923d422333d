from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import NotFoundError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.order.domain.entity.order_entity import Order
from seatlock.service.order.domain.entity.ticket_entity import Ticket
from seatlock.service.reservation.app.command.promote_hold_use_case import PromoteHoldUseCase
from seatlock.service.reservation.app.command.release_hold_use_case import ReleaseHoldUseCase
from seatlock.service.reservation.app.dto.hold_dto import PromotionResult


@attrs.define
class SettlementResult:
    order: Order
    applied: bool  # False when the order had already left pending
    promotion: Optional[PromotionResult] = None
    released: int = 0
    tickets: List[Ticket] = attrs.field(factory=list)


class SettlePaymentUseCase:
    """
    Apply a payment outcome to a pending order.

    Success: order paid, allocations written, hold released, one ticket
    issued per seat item.
    Failure: order failed, hold released.

    The order row is locked for the whole unit of work and everything commits
    once, so a failed promotion leaves the order pending. Redelivery of an
    outcome for a settled order changes nothing.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        promote_hold: PromoteHoldUseCase,
        release_hold: ReleaseHoldUseCase,
    ) -> None:
        self.uow_factory = uow_factory
        self.promote_hold = promote_hold
        self.release_hold = release_hold
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            promote_hold=PromoteHoldUseCase(uow_factory=uow_factory),
            release_hold=ReleaseHoldUseCase(uow_factory=uow_factory),
        )

    @Logger.io
    async def execute(
        self, *, order_ref: str, succeeded: bool, tx_id: Optional[str] = None
    ) -> SettlementResult:
        with self.tracer.start_as_current_span(
            'use_case.settle_payment',
            attributes={'order.ref': order_ref, 'payment.succeeded': succeeded},
        ):
            async with self.uow_factory() as uow:
                order = await uow.order_repo.get_by_ref(order_ref=order_ref, for_update=True)
                if order is None:
                    raise NotFoundError(f'Order {order_ref} not found')
                if not order.is_pending:
                    Logger.base.info(
                        f'↩️ [ORDER] {order_ref} already {order.status}, ignoring settlement'
                    )
                    return SettlementResult(order=order, applied=False)

                if succeeded:
                    order.mark_paid(tx_id=tx_id)
                    await uow.order_repo.update_status(order=order)
                    promotion = await self.promote_hold.promote_within(
                        uow, order_id=str(order.id), event_id=order.event_id
                    )
                    tickets = await uow.ticket_repo.insert_tickets(
                        tickets=Ticket.issue_for(order)
                    )
                    await uow.commit()
                    metrics.record_tickets_issued(count=len(tickets))
                    Logger.base.info(f'💰 [ORDER] {order_ref} paid, {len(tickets)} tickets')
                    return SettlementResult(
                        order=order,
                        applied=True,
                        promotion=promotion,
                        released=promotion.released,
                        tickets=tickets,
                    )

                order.mark_failed()
                await uow.order_repo.update_status(order=order)
                released = 0
                if order.hold_id:
                    released = await self.release_hold.release_within(uow, hold_id=order.hold_id)
                await uow.commit()
                Logger.base.info(f'❌ [ORDER] {order_ref} payment failed')
                return SettlementResult(order=order, applied=True, released=released)
