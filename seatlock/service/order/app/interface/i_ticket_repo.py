from abc import ABC, abstractmethod
from typing import List, Sequence

from seatlock.service.order.domain.entity.ticket_entity import Ticket


class ITicketRepo(ABC):
    @abstractmethod
    async def insert_tickets(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_by_order(self, *, order_id: str) -> List[Ticket]:
        """Tickets of one order in (table_id, seat_no) order"""
