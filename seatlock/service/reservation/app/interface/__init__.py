"""Reservation Service Interfaces"""

from seatlock.service.reservation.app.interface.i_order_line_item_reader import (
    IOrderLineItemReader,
)
from seatlock.service.reservation.app.interface.i_seat_lock_repo import ISeatLockRepo


__all__ = [
    'IOrderLineItemReader',
    'ISeatLockRepo',
]
