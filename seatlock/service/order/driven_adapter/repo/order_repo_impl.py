"""
Order Repository Implementation (PostgreSQL)

Also serves as the order line item reader used by settlement, so promotion
reads the items through the same session that locked the order row.
"""

from typing import List, Optional
import uuid

from sqlalchemy import delete, func, insert as sa_insert, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from seatlock.platform.logging.loguru_io import Logger
from seatlock.service.order.app.interface.i_order_repo import IOrderRepo
from seatlock.service.order.domain.entity.order_entity import (
    Customer,
    Order,
    OrderItem,
    OrderStatus,
)
from seatlock.service.order.driven_adapter.model.order_model import OrderItemModel, OrderModel
from seatlock.service.reservation.domain.entity.order_line_item import LineItemType, OrderLineItem


def _pg_uuid(value: UUID | str) -> uuid.UUID:
    return uuid.UUID(str(value))


class OrderRepoImpl(IOrderRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _item_to_entity(model: OrderItemModel) -> OrderItem:
        return OrderItem(
            item_type=LineItemType(model.item_type),
            table_id=model.table_id,
            seat_no=model.seat_no,
            qty=model.qty,
            unit_price=model.unit_price,
            amount=model.amount,
        )

    @classmethod
    def _to_entity(cls, model: OrderModel) -> Order:
        return Order(
            id=UUID(str(model.id)),
            order_ref=model.order_ref,
            event_id=model.event_id,
            hold_id=model.hold_id,
            customer=Customer(
                first_name=model.customer_first_name,
                last_name=model.customer_last_name,
                email=model.customer_email,
                phone=model.customer_phone,
            ),
            currency=model.currency,
            net_amount=model.net_amount,
            fee_amount=model.fee_amount,
            gross_amount=model.gross_amount,
            status=OrderStatus(model.status),
            items=[cls._item_to_entity(item) for item in model.items],
            created_at=model.created_at,
            updated_at=model.updated_at,
            paid_at=model.paid_at,
            payment_tx_id=model.payment_tx_id,
            checked_in_at=model.checked_in_at,
        )

    @Logger.io
    async def get_by_ref(self, *, order_ref: str, for_update: bool = False) -> Optional[Order]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.order_ref == order_ref)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=OrderModel)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @Logger.io
    async def upsert(self, *, order: Order) -> Order:
        values = {
            'id': _pg_uuid(order.id),
            'order_ref': order.order_ref,
            'event_id': order.event_id,
            'hold_id': order.hold_id,
            'customer_first_name': order.customer.first_name,
            'customer_last_name': order.customer.last_name,
            'customer_email': order.customer.email,
            'customer_phone': order.customer.phone,
            'currency': order.currency,
            'net_amount': order.net_amount,
            'fee_amount': order.fee_amount,
            'gross_amount': order.gross_amount,
            'status': order.status.value,
        }
        stmt = insert(OrderModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[OrderModel.order_ref],
            set_={key: stmt.excluded[key] for key in values if key not in ('id', 'order_ref')}
            | {'updated_at': func.now()},
        ).returning(OrderModel.id)
        order_pk = (await self.session.execute(stmt)).scalar_one()

        await self.session.execute(
            delete(OrderItemModel).where(OrderItemModel.order_id == order_pk)
        )
        if order.items:
            await self.session.execute(
                sa_insert(OrderItemModel),
                [
                    {
                        'order_id': order_pk,
                        'item_type': item.item_type.value,
                        'table_id': item.table_id,
                        'seat_no': item.seat_no,
                        'qty': item.qty,
                        'unit_price': item.unit_price,
                        'amount': item.amount,
                    }
                    for item in order.items
                ],
            )

        order.id = UUID(str(order_pk))
        return order

    @Logger.io
    async def update_status(self, *, order: Order) -> Order:
        await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == _pg_uuid(order.id))
            .values(
                status=order.status.value,
                paid_at=order.paid_at,
                payment_tx_id=order.payment_tx_id,
                checked_in_at=order.checked_in_at,
                updated_at=order.updated_at,
            )
        )
        return order

    async def get_line_items(self, *, order_id: str) -> List[OrderLineItem]:
        result = await self.session.execute(
            select(OrderItemModel.item_type, OrderItemModel.table_id, OrderItemModel.seat_no)
            .where(OrderItemModel.order_id == _pg_uuid(order_id))
            .order_by(OrderItemModel.id)
        )
        return [
            OrderLineItem(
                item_type=LineItemType(row.item_type), table_id=row.table_id, seat_no=row.seat_no
            )
            for row in result
        ]

    async def get_hold_id(self, *, order_id: str) -> Optional[str]:
        result = await self.session.execute(
            select(OrderModel.hold_id).where(OrderModel.id == _pg_uuid(order_id))
        )
        return result.scalar_one_or_none()
