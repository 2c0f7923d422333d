from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import NotFoundError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.domain.entity.order_entity import Order, OrderStatus
from seatlock.service.reservation.app.command.release_hold_use_case import ReleaseHoldUseCase


class CancelOrderUseCase:
    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, release_hold: ReleaseHoldUseCase
    ) -> None:
        self.uow_factory = uow_factory
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
            release_hold=ReleaseHoldUseCase(uow_factory=uow_factory),
        )

    @Logger.io
    async def execute(self, *, order_ref: str) -> Order:
        with self.tracer.start_as_current_span(
            'use_case.cancel_order', attributes={'order.ref': order_ref}
        ):
            async with self.uow_factory() as uow:
                order = await uow.order_repo.get_by_ref(order_ref=order_ref, for_update=True)
                if order is None:
                    raise NotFoundError(f'Order {order_ref} not found')
                if order.status == OrderStatus.CANCELLED:
                    return order

                # Raises DomainError for paid or failed orders
                order.cancel()
                await uow.order_repo.update_status(order=order)
                if order.hold_id:
                    await self.release_hold.release_within(uow, hold_id=order.hold_id)
                await uow.commit()

        Logger.base.info(f'🚫 [ORDER] {order_ref} cancelled')
        return order
