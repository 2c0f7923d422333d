"""
Order Line Item Reader Interface

The reconciler only needs to know what an order bought and which hold it
came from; the order context implements this on its repository.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from seatlock.service.reservation.domain.entity.order_line_item import OrderLineItem


class IOrderLineItemReader(ABC):
    @abstractmethod
    async def get_line_items(self, *, order_id: str) -> List[OrderLineItem]:
        pass

    @abstractmethod
    async def get_hold_id(self, *, order_id: str) -> Optional[str]:
        pass
