from enum import StrEnum
from typing import Optional

import attrs

from seatlock.service.reservation.domain.value_object.seat_key import FULL_TABLE_SEAT, SeatKey


class LineItemType(StrEnum):
    SEAT = 'seat'
    VIP_TABLE = 'vip_table'


@attrs.frozen
class OrderLineItem:
    """What a paid order allocates, as seen by settlement."""

    item_type: LineItemType
    table_id: Optional[str]
    seat_no: Optional[int] = None

    def allocation_key(self) -> Optional[SeatKey]:
        if not self.table_id:
            return None
        if self.item_type == LineItemType.VIP_TABLE:
            return SeatKey(table_id=self.table_id, seat_no=FULL_TABLE_SEAT)
        if not self.seat_no:
            return None
        return SeatKey(table_id=self.table_id, seat_no=self.seat_no)
