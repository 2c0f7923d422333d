"""
Seat Group Domain - grouping and expansion of requested seat keys

Requests arrive as loose (table_id, seat_no) pairs. Before any conflict check
they are grouped per table and each table resolves to one of two modes:

- FULL: the request covers the whole table (seat 0 present, or exactly 1..N),
  stored as a single sentinel row with seat_no 0
- PARTIAL: individual seats, deduplicated and ascending

Presentation goes the other way: a sentinel row expands to N concrete seats.
"""

from enum import StrEnum
from typing import Iterable, List

import attrs

from seatlock.platform.exception.exceptions import ValidationError
from seatlock.service.reservation.domain.value_object.seat_key import FULL_TABLE_SEAT, SeatKey


class GroupMode(StrEnum):
    FULL = 'full'
    PARTIAL = 'partial'


@attrs.frozen
class SeatGroup:
    table_id: str
    mode: GroupMode
    seats: tuple[int, ...] = ()

    @property
    def is_full(self) -> bool:
        return self.mode == GroupMode.FULL

    def seat_keys(self) -> List[SeatKey]:
        if self.is_full:
            return [SeatKey(table_id=self.table_id, seat_no=FULL_TABLE_SEAT)]
        return [SeatKey(table_id=self.table_id, seat_no=seat_no) for seat_no in self.seats]


def normalize(requested_seats: Iterable[SeatKey], *, seats_per_table: int) -> List[SeatGroup]:
    # Tables keep first-seen order so conflict reports are deterministic
    seats_by_table: dict[str, set[int]] = {}
    for key in requested_seats:
        table_id = key.table_id.strip() if key.table_id else ''
        if not table_id:
            raise ValidationError('tableId must not be blank')
        if key.seat_no > seats_per_table:
            raise ValidationError(
                f'seatNo {key.seat_no} exceeds table capacity {seats_per_table} on {table_id}'
            )
        seats_by_table.setdefault(table_id, set()).add(key.seat_no)

    whole_table = set(range(1, seats_per_table + 1))
    groups: List[SeatGroup] = []
    for table_id, seat_nos in seats_by_table.items():
        if FULL_TABLE_SEAT in seat_nos or seat_nos == whole_table:
            groups.append(SeatGroup(table_id=table_id, mode=GroupMode.FULL))
            continue

        positive = tuple(sorted(seat_no for seat_no in seat_nos if seat_no > 0))
        if positive:
            groups.append(SeatGroup(table_id=table_id, mode=GroupMode.PARTIAL, seats=positive))

    return groups


def expand(rows: Iterable[SeatKey], *, seats_per_table: int) -> List[SeatKey]:
    expanded: List[SeatKey] = []
    for row in rows:
        if row.is_full_table:
            expanded.extend(
                SeatKey(table_id=row.table_id, seat_no=seat_no)
                for seat_no in range(1, seats_per_table + 1)
            )
        else:
            expanded.append(row)
    return expanded
