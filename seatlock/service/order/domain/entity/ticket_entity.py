from datetime import datetime
from enum import StrEnum
import secrets
from typing import List, Optional

import attrs

from seatlock.service.order.domain.entity.order_entity import Order
from seatlock.service.reservation.domain.entity.order_line_item import LineItemType
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class TicketStatus(StrEnum):
    VALID = 'valid'


def generate_ticket_code() -> str:
    return f'T-{secrets.token_hex(8).upper()}'


@attrs.define
class Ticket:
    """One admission per paid seat item; whole-table items carry no ticket"""

    order_id: str
    table_id: str
    seat_no: int
    code: str
    status: TicketStatus = TicketStatus.VALID
    created_at: Optional[datetime] = None

    @property
    def key(self) -> SeatKey:
        return SeatKey(table_id=self.table_id, seat_no=self.seat_no)

    @classmethod
    def issue_for(cls, order: Order) -> List['Ticket']:
        tickets: List[Ticket] = []
        for item in order.items:
            if item.item_type != LineItemType.SEAT or not item.table_id or not item.seat_no:
                continue
            tickets.append(
                cls(
                    order_id=str(order.id),
                    table_id=item.table_id,
                    seat_no=item.seat_no,
                    code=generate_ticket_code(),
                )
            )
        return tickets
