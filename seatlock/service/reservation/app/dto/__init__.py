"""Reservation Application DTOs"""

from seatlock.service.reservation.app.dto.hold_dto import HoldResult, PromotionResult


__all__ = [
    'HoldResult',
    'PromotionResult',
]
