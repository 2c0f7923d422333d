from enum import StrEnum
from typing import Any, List, Sequence

import attrs

from seatlock.platform.exception.exceptions import ConflictError
from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class ConflictKind(StrEnum):
    SOLD = 'sold'
    HELD = 'held'


@attrs.frozen
class HoldConflict:
    key: SeatKey
    kind: ConflictKind


class SeatConflictError(ConflictError):
    code = 'seat_conflict'

    def __init__(self, message: str, conflicts: Sequence[HoldConflict]) -> None:
        super().__init__(message)
        self.conflicts: List[HoldConflict] = list(conflicts)

    def to_response(self) -> dict[str, Any]:
        return {
            'detail': self.message,
            'code': self.code,
            'conflicts': [
                {
                    'tableId': conflict.key.table_id,
                    'seatNo': conflict.key.seat_no,
                    'kind': str(conflict.kind),
                }
                for conflict in self.conflicts
            ],
        }


class SeatsSoldError(SeatConflictError):
    code = 'seats_sold'

    def __init__(self, conflicts: Sequence[HoldConflict]) -> None:
        super().__init__('Some seats already sold', conflicts)


class SeatsHeldError(SeatConflictError):
    code = 'seats_held'

    def __init__(self, conflicts: Sequence[HoldConflict]) -> None:
        super().__init__('Some seats already held', conflicts)


def raise_for_conflicts(conflicts: Sequence[HoldConflict]) -> None:
    if not conflicts:
        return
    if any(conflict.kind == ConflictKind.SOLD for conflict in conflicts):
        raise SeatsSoldError(conflicts)
    raise SeatsHeldError(conflicts)
