import time
from typing import List, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from seatlock.platform.config.core_setting import Settings
from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import DomainError, NotFoundError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.domain.entity.order_entity import Order, OrderStatus
from seatlock.service.order.domain.entity.ticket_entity import Ticket
from seatlock.service.order.domain.value_object.ticket_pass import TicketPass, build_ticket_pass


@attrs.define
class TicketPassResult:
    order: Order
    tickets: List[Ticket]
    ticket_pass: TicketPass


class GetTicketPassUseCase:
    """Signed gate pass for a paid order, covering its seat tickets"""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, signing_secret: str) -> None:
        self.uow_factory = uow_factory
        self.signing_secret = signing_secret
        if not signing_secret:
            Logger.base.warning('⚠️ [TICKET] TICKET_SIGNING_SECRET is empty, passes are weak')

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            signing_secret=config.TICKET_SIGNING_SECRET.get_secret_value(),
        )

    @Logger.io
    async def execute(self, *, order_ref: str) -> TicketPassResult:
        async with self.uow_factory() as uow:
            order = await uow.order_repo.get_by_ref(order_ref=order_ref)
            if order is None:
                raise NotFoundError(f'Order {order_ref} not found')
            if order.status != OrderStatus.PAID:
                raise DomainError(f'Order {order_ref} is {order.status}, no tickets issued')
            tickets = await uow.ticket_repo.list_by_order(order_id=str(order.id))

        ticket_pass = build_ticket_pass(
            order_id=str(order.id),
            order_ref=order.order_ref,
            tx_id=order.payment_tx_id or '',
            seats=[(ticket.table_id, ticket.seat_no) for ticket in tickets],
            iat=int(time.time()),
            secret=self.signing_secret,
        )
        return TicketPassResult(order=order, tickets=tickets, ticket_pass=ticket_pass)
