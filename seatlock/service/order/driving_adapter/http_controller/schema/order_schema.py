from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from seatlock.platform.types.uuid7_utils_types import UtilsUUID7
from seatlock.service.order.domain.entity.order_entity import Customer, Order, OrderItem
from seatlock.service.order.domain.entity.ticket_entity import Ticket
from seatlock.service.reservation.domain.entity.order_line_item import LineItemType
from seatlock.service.reservation.driving_adapter.http_controller.schema.seat_lock_schema import (
    SeatKeySchema,
)


_WIRE_ITEM_TYPES = {'seat': LineItemType.SEAT, 'vipTable': LineItemType.VIP_TABLE}


class CustomerSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(default='', alias='firstName')
    last_name: str = Field(default='', alias='lastName')
    email: str = ''
    phone: str = ''

    def to_entity(self) -> Customer:
        return Customer(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email.strip(),
            phone=self.phone,
        )


class OrderItemSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal['seat', 'vipTable'] = 'seat'
    table_id: Optional[str] = Field(default=None, alias='tableId')
    seat_no: Optional[int] = Field(default=None, alias='seatNo')
    qty: int = 1
    unit_price: Decimal = Field(default=Decimal('0'), alias='unitPrice')

    def to_entity(self) -> OrderItem:
        return OrderItem.create(
            item_type=_WIRE_ITEM_TYPES[self.type],
            table_id=self.table_id,
            seat_no=self.seat_no,
            qty=self.qty,
            unit_price=self.unit_price,
        )


class OrderCreateRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            'example': {
                'orderReference': 'ORD-20250110-0001',
                'holdId': 'H01936D8F5E737C4EA9C5123456789ABC',
                'currency': 'LKR',
                'customer': {
                    'firstName': 'Nimal',
                    'lastName': 'Perera',
                    'email': 'nimal@example.com',
                    'phone': '+94770000000',
                },
                'items': [
                    {'type': 'seat', 'tableId': 'A', 'seatNo': 3, 'qty': 1, 'unitPrice': 5000},
                    {'type': 'vipTable', 'tableId': 'B', 'qty': 1, 'unitPrice': 45000},
                ],
            }
        },
    )

    order_reference: str = Field(alias='orderReference')
    event_id: Optional[str] = Field(default=None, alias='eventId')
    hold_id: Optional[str] = Field(default=None, alias='holdId')
    currency: Optional[str] = None
    customer: CustomerSchema = Field(default_factory=CustomerSchema)
    items: List[OrderItemSchema] = []


class SettlementRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    succeeded: bool
    transaction_id: Optional[str] = Field(default=None, alias='transactionId')


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    table_id: Optional[str] = Field(default=None, alias='tableId')
    seat_no: Optional[int] = Field(default=None, alias='seatNo')
    qty: int
    unit_price: Decimal = Field(alias='unitPrice')
    amount: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    id: UtilsUUID7
    order_reference: str = Field(alias='orderReference')
    event_id: str = Field(alias='eventId')
    hold_id: Optional[str] = Field(default=None, alias='holdId')
    status: str
    currency: str
    net_amount: Decimal = Field(alias='netAmount')
    fee_amount: Decimal = Field(alias='feeAmount')
    gross_amount: Decimal = Field(alias='grossAmount')
    items: List[OrderItemResponse] = []
    created_at: Optional[datetime] = Field(default=None, alias='createdAt')
    paid_at: Optional[datetime] = Field(default=None, alias='paidAt')
    checked_in_at: Optional[datetime] = Field(default=None, alias='checkedInAt')

    @classmethod
    def from_entity(cls, order: Order) -> 'OrderResponse':
        wire_types = {value: key for key, value in _WIRE_ITEM_TYPES.items()}
        return cls(
            id=order.id,
            order_reference=order.order_ref,
            event_id=order.event_id,
            hold_id=order.hold_id,
            status=order.status.value,
            currency=order.currency,
            net_amount=order.net_amount,
            fee_amount=order.fee_amount,
            gross_amount=order.gross_amount,
            items=[
                OrderItemResponse(
                    type=wire_types[item.item_type],
                    table_id=item.table_id,
                    seat_no=item.seat_no,
                    qty=item.qty,
                    unit_price=item.unit_price,
                    amount=item.amount,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            paid_at=order.paid_at,
            checked_in_at=order.checked_in_at,
        )


class TicketResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    table_id: str = Field(alias='tableId')
    seat_no: int = Field(alias='seatNo')
    status: str

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            code=ticket.code,
            table_id=ticket.table_id,
            seat_no=ticket.seat_no,
            status=ticket.status.value,
        )


class SettlementResponse(BaseModel):
    ok: bool = True
    applied: bool
    order: OrderResponse
    allocated: List[SeatKeySchema] = []
    released: int = 0
    tickets: List[TicketResponse] = []


class TicketPassResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    order_reference: str = Field(alias='orderReference')
    tickets: List[TicketResponse] = []
    ticket_pass: str = Field(alias='pass')  # signed JSON text, encoded into the gate QR


class TicketPassCheckResponse(BaseModel):
    ok: bool = True
    data: Dict[str, Any]


class CheckInRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_ref: str = Field(alias='orderRef', min_length=1)


class CheckInResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    message: str = 'Order checked-in successfully'
    order_ref: str = Field(alias='orderRef')
    checked_in_at: Optional[datetime] = Field(default=None, alias='checkedInAt')
