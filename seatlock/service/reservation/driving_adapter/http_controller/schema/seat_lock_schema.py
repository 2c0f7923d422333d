from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

from seatlock.service.reservation.domain.value_object.seat_key import SeatKey


class SeatKeySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(alias='tableId')
    seat_no: int = Field(alias='seatNo')

    @field_validator('table_id', mode='before')
    @classmethod
    def coerce_table_id(cls, value: object) -> object:
        # Table ids arrive as numbers from older seat-map clients
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_key(cls, key: SeatKey) -> 'SeatKeySchema':
        return cls(table_id=key.table_id, seat_no=key.seat_no)

    def to_key(self) -> SeatKey:
        return SeatKey(table_id=self.table_id, seat_no=self.seat_no)


class HoldRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            'examples': [
                {'seats': [{'tableId': 'A', 'seatNo': 3}, {'tableId': 'A', 'seatNo': 4}]},
                {'seats': [{'tableId': 'B', 'seatNo': 0}], 'ttlSec': 300, 'holdId': 'H0192...'},
            ]
        },
    )

    seats: List[SeatKeySchema]
    ttl_sec: Optional[Union[StrictInt, StrictFloat]] = Field(default=None, alias='ttlSec')
    hold_id: Optional[str] = Field(default=None, alias='holdId')
    event_id: Optional[str] = Field(default=None, alias='eventId')


class HoldResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    hold_id: str = Field(alias='holdId')
    seats: List[SeatKeySchema]
    expires_at: int = Field(alias='expiresAt')  # epoch seconds


class ActiveLocksResponse(BaseModel):
    ok: bool = True
    locks: List[SeatKeySchema]


class ReleaseHoldResponse(BaseModel):
    ok: bool = True
    released: int


class HealthResponse(BaseModel):
    status: str
    service: str
    active_locks: int
