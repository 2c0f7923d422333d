from datetime import datetime
from typing import Optional

import attrs

from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


@attrs.define
class TemporaryHold:
    event_id: str
    table_id: str
    seat_no: int
    hold_id: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    @property
    def key(self) -> SeatKey:
        return SeatKey(table_id=self.table_id, seat_no=self.seat_no)

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now

    def is_owned_by(self, hold_id: Optional[str]) -> bool:
        # No caller hold id means nothing is owned
        return bool(hold_id) and self.hold_id == hold_id


@attrs.define
class PermanentAllocation:
    event_id: str
    order_id: str
    table_id: str
    seat_no: int

    @property
    def key(self) -> SeatKey:
        return SeatKey(table_id=self.table_id, seat_no=self.seat_no)
