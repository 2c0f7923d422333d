from typing import List, Sequence
import uuid

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.app.interface.i_ticket_repo import ITicketRepo
from seatlock.service.order.domain.entity.ticket_entity import Ticket, TicketStatus
from seatlock.service.order.driven_adapter.model.ticket_model import TicketModel


class TicketRepoImpl(ITicketRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: TicketModel) -> Ticket:
        return Ticket(
            order_id=str(model.order_id),
            table_id=model.table_id,
            seat_no=model.seat_no,
            code=model.code,
            status=TicketStatus(model.status),
            created_at=model.created_at,
        )

    @Logger.io
    async def insert_tickets(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        if not tickets:
            return []
        result = await self.session.execute(
            insert(TicketModel).returning(TicketModel),
            [
                {
                    'order_id': uuid.UUID(ticket.order_id),
                    'table_id': ticket.table_id,
                    'seat_no': ticket.seat_no,
                    'code': ticket.code,
                    'status': ticket.status.value,
                }
                for ticket in tickets
            ],
        )
        return [self._to_entity(model) for model in result.scalars()]

    @Logger.io
    async def list_by_order(self, *, order_id: str) -> List[Ticket]:
        result = await self.session.execute(
            select(TicketModel)
            .where(TicketModel.order_id == uuid.UUID(order_id))
            .order_by(TicketModel.table_id, TicketModel.seat_no)
        )
        return [self._to_entity(model) for model in result.scalars()]
