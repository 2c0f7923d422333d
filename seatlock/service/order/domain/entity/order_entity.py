from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
import re
from typing import List, Optional

import attrs
from uuid_utils import UUID

from seatlock.platform.exception.exceptions import DomainError, ValidationError
from seatlock.service.reservation.domain.entity.order_line_item import LineItemType, OrderLineItem
from seatlock.service.reservation.domain.value_object.seat_key import FULL_TABLE_SEAT


_EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
_CENTS = Decimal('0.01')


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


def to_money(value: Decimal | float | int | str) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@attrs.define
class OrderItem:
    item_type: LineItemType
    table_id: Optional[str]
    seat_no: Optional[int]
    qty: int
    unit_price: Decimal
    amount: Decimal = attrs.field(default=Decimal('0.00'))

    @classmethod
    def create(
        cls,
        *,
        item_type: LineItemType,
        table_id: Optional[str],
        seat_no: Optional[int],
        qty: int,
        unit_price: Decimal | float | int | str,
    ) -> 'OrderItem':
        if qty < 1:
            raise ValidationError('qty must be at least 1')
        price = to_money(unit_price)
        if price < 0:
            raise ValidationError('unit price must not be negative')
        if item_type == LineItemType.VIP_TABLE:
            seat_no = FULL_TABLE_SEAT
        return cls(
            item_type=item_type,
            table_id=table_id,
            seat_no=seat_no,
            qty=qty,
            unit_price=price,
            amount=to_money(price * qty),
        )

    def to_line_item(self) -> OrderLineItem:
        return OrderLineItem(item_type=self.item_type, table_id=self.table_id, seat_no=self.seat_no)


@attrs.define
class Customer:
    first_name: str
    last_name: str
    email: str
    phone: str = ''


@attrs.define
class Order:
    id: UUID
    order_ref: str
    event_id: str
    customer: Customer
    currency: str
    net_amount: Decimal
    fee_amount: Decimal
    gross_amount: Decimal
    hold_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = attrs.field(factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_tx_id: Optional[str] = None
    checked_in_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        order_ref: str,
        event_id: str,
        hold_id: Optional[str],
        customer: Customer,
        currency: str,
        items: List[OrderItem],
        fee_rate: Decimal | float,
    ) -> 'Order':
        if not order_ref or not order_ref.strip():
            raise ValidationError('orderReference is required')
        if not customer.email or not _EMAIL_PATTERN.match(customer.email):
            raise ValidationError('Valid email required')
        if not items:
            raise ValidationError('No items')

        net_amount = to_money(sum((item.amount for item in items), Decimal('0')))
        fee_amount = to_money(net_amount * Decimal(str(fee_rate)))
        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            order_ref=order_ref.strip(),
            event_id=event_id,
            hold_id=hold_id or None,
            customer=customer,
            currency=currency,
            net_amount=net_amount,
            fee_amount=fee_amount,
            gross_amount=to_money(net_amount + fee_amount),
            status=OrderStatus.PENDING,
            items=items,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def mark_paid(self, *, tx_id: Optional[str] = None) -> None:
        if not self.is_pending:
            raise DomainError(f'Order {self.order_ref} is {self.status}, cannot be paid')
        now = datetime.now(timezone.utc)
        self.status = OrderStatus.PAID
        self.paid_at = now
        self.payment_tx_id = tx_id or None
        self.updated_at = now

    def mark_failed(self) -> None:
        if not self.is_pending:
            raise DomainError(f'Order {self.order_ref} is {self.status}, cannot fail')
        self.status = OrderStatus.FAILED
        self.updated_at = datetime.now(timezone.utc)

    def cancel(self) -> None:
        if self.status == OrderStatus.PAID:
            raise DomainError('Paid order cannot be cancelled')
        if not self.is_pending:
            raise DomainError(f'Order {self.order_ref} is already {self.status}')
        self.status = OrderStatus.CANCELLED
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_checked_in(self) -> bool:
        return self.checked_in_at is not None

    def check_in(self) -> None:
        if self.status != OrderStatus.PAID:
            raise DomainError(f'Order {self.order_ref} is {self.status}, only paid orders check in')
        if self.is_checked_in:
            raise DomainError(f'Order {self.order_ref} already checked in')
        now = datetime.now(timezone.utc)
        self.checked_in_at = now
        self.updated_at = now
