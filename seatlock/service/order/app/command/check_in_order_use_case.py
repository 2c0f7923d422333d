from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import NotFoundError, ValidationError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.platform.metrics.seat_lock_metrics import metrics
from seatlock.service.order.domain.entity.order_entity import Order


class CheckInOrderUseCase:
    """
    Gate check-in of a paid order, once.

    The order row is locked so two scanners admitting the same order cannot
    both succeed.
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
    async def execute(self, *, order_ref: str) -> Order:
        if not order_ref or not order_ref.strip():
            raise ValidationError('orderRef required')

        with self.tracer.start_as_current_span(
            'use_case.check_in_order', attributes={'order.ref': order_ref}
        ):
            async with self.uow_factory() as uow:
                order = await uow.order_repo.get_by_ref(
                    order_ref=order_ref.strip(), for_update=True
                )
                if order is None:
                    raise NotFoundError(f'Order {order_ref} not found')

                # Raises DomainError when not paid or already checked in
                order.check_in()
                await uow.order_repo.update_status(order=order)
                await uow.commit()

        metrics.record_check_in()
        Logger.base.info(f'🚪 [CHECK-IN] {order.order_ref} checked in at {order.checked_in_at}')
        return order
