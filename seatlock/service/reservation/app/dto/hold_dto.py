"""
Hold DTOs

Result objects returned by the reservation use cases.
"""

from datetime import datetime
from typing import List

import attrs

from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


@attrs.define
class HoldResult:
    """Granted (or renewed) hold"""

    hold_id: str
    seats: List[SeatKey]  # resolved keys, full tables as seat_no 0
    expires_at: datetime

    @property
    def expires_at_epoch(self) -> int:
        return int(self.expires_at.timestamp())


@attrs.define
class PromotionResult:
    """Outcome of turning an order's hold into permanent allocations"""

    allocated: List[SeatKey]
    inserted: int  # rows that did not exist before
    released: int  # hold rows deleted for the order's hold id

    @classmethod
    def empty(cls) -> 'PromotionResult':
        return cls(allocated=[], inserted=0, released=0)
