from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import ConflictError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.domain.entity.order_entity import Customer, Order, OrderItem


class CreateOrderUseCase:
    """
    Checkout initiation: record what the buyer is about to pay for.

    Re-submitting a pending order reference overwrites it (customer, amounts,
    items); an order that already left pending is refused.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, fee_rate: float, default_currency: str
    ) -> None:
        self.uow_factory = uow_factory
        self.fee_rate = fee_rate
        self.default_currency = default_currency
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
            fee_rate=config.ORDER_FEE_RATE,
            default_currency=config.DEFAULT_CURRENCY,
        )

    @Logger.io
    async def execute(
        self,
        *,
        order_ref: str,
        event_id: str,
        hold_id: Optional[str],
        customer: Customer,
        items: List[OrderItem],
        currency: Optional[str] = None,
    ) -> Order:
        order = Order.create(
            id=uuid_utils.uuid7(),
            order_ref=order_ref,
            event_id=event_id,
            hold_id=hold_id,
            customer=customer,
            currency=currency or self.default_currency,
            items=items,
            fee_rate=self.fee_rate,
        )

        with self.tracer.start_as_current_span(
            'use_case.create_order',
            attributes={'order.ref': order.order_ref, 'event.id': event_id},
        ):
            async with self.uow_factory() as uow:
                existing = await uow.order_repo.get_by_ref(
                    order_ref=order.order_ref, for_update=True
                )
                if existing is not None:
                    if not existing.is_pending:
                        raise ConflictError(f'Order already processed ({existing.status})')
                    order.id = existing.id
                    order.created_at = existing.created_at

                order = await uow.order_repo.upsert(order=order)
                await uow.commit()

        Logger.base.info(
            f'🧾 [ORDER] {order.order_ref} pending: {order.gross_amount} {order.currency} '
            f'({len(order.items)} items, hold {order.hold_id})'
        )
        return order
