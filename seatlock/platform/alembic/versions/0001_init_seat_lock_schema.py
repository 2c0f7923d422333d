"""init_seat_lock_schema

Revision ID: 0001
Revises:
Create Date: 2025-12-06

Schema:
- seat_locks: temporary holds, one row per (event_id, table_id, seat_no); seat_no 0 = whole table
- done_seatlocks: permanent allocations written on payment success
- orders: checkout records keyed by order_ref
- order_items: seat / vip_table lines of an order (vip_table stored with seat_no 0)
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # ========== Lock tables ==========

    op.create_table(
        'seat_locks',
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('table_id', sa.String(length=64), nullable=False),
        sa.Column('seat_no', sa.Integer(), nullable=False),
        sa.Column('hold_id', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('event_id', 'table_id', 'seat_no'),
    )
    op.create_index(op.f('ix_seat_locks_hold_id'), 'seat_locks', ['hold_id'], unique=False)
    op.create_index('ix_seat_locks_expires_at', 'seat_locks', ['expires_at'], unique=False)

    op.create_table(
        'done_seatlocks',
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('table_id', sa.String(length=64), nullable=False),
        sa.Column('seat_no', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(length=64), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('event_id', 'table_id', 'seat_no'),
    )
    op.create_index(
        op.f('ix_done_seatlocks_order_id'), 'done_seatlocks', ['order_id'], unique=False
    )

    # ========== Order tables ==========

    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_ref', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('hold_id', sa.String(length=64), nullable=True),
        sa.Column('customer_first_name', sa.String(length=100), nullable=False),
        sa.Column('customer_last_name', sa.String(length=100), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('net_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('fee_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('gross_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_ref'),
    )
    op.create_index(op.f('ix_orders_event_id'), 'orders', ['event_id'], unique=False)
    op.create_index(op.f('ix_orders_hold_id'), 'orders', ['hold_id'], unique=False)

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('item_type', sa.String(length=20), nullable=False),
        sa.Column('table_id', sa.String(length=64), nullable=True),
        sa.Column('seat_no', sa.Integer(), nullable=True),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_order_items_order_id'), 'order_items', ['order_id'], unique=False)


def downgrade() -> None:
    """Drop all tables in reverse order of creation."""
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('done_seatlocks')
    op.drop_table('seat_locks')
