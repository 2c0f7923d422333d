"""
Order Repository Interface

Bound to the unit-of-work session; writes are committed by the caller.
"""

from abc import ABC, abstractmethod
from typing import Optional

from seatlock.service.order.domain.entity.order_entity import Order
from seatlock.service.reservation.app.interface.i_order_line_item_reader import (
    IOrderLineItemReader,
)


class IOrderRepo(IOrderLineItemReader, ABC):
    @abstractmethod
    async def get_by_ref(self, *, order_ref: str, for_update: bool = False) -> Optional[Order]:
        """
        Load an order with its items.

        for_update takes a row lock (SELECT ... FOR UPDATE) held until the
        unit of work ends, so concurrent settlements of one order serialize.
        """

    @abstractmethod
    async def upsert(self, *, order: Order) -> Order:
        """Insert or overwrite the order by order_ref and replace all of its items"""

    @abstractmethod
    async def update_status(self, *, order: Order) -> Order:
        pass
