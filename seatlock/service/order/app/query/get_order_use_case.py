from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from seatlock.platform.config.di import Container
from seatlock.platform.database.unit_of_work import UnitOfWorkFactory
from seatlock.platform.exception.exceptions import NotFoundError
from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.domain.entity.order_entity import Order


class GetOrderUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, order_ref: str) -> Order:
        async with self.uow_factory() as uow:
            order = await uow.order_repo.get_by_ref(order_ref=order_ref)
        if order is None:
            raise NotFoundError(f'Order {order_ref} not found')
        return order
