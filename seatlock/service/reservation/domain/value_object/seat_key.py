import attrs


FULL_TABLE_SEAT = 0


@attrs.frozen(order=True)
class SeatKey:
    """
    One lockable position. seat_no 0 stands for the whole table and is a
    distinct key; it is never expanded when two keys are compared.
    """

    table_id: str
    seat_no: int

    @property
    def is_full_table(self) -> bool:
        return self.seat_no == FULL_TABLE_SEAT
