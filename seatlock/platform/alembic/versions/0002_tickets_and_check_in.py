"""tickets_and_check_in

Revision ID: 0002
Revises: 0001
Create Date: 2025-12-13

Schema:
- tickets: one row per paid seat item, unique T-<hex> code
- orders.payment_tx_id: gateway transaction id recorded on payment success
- orders.checked_in_at: gate check-in time, NULL until checked in
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, Sequence[str], None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('orders', sa.Column('payment_tx_id', sa.String(length=128), nullable=True))
    op.add_column('orders', sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True))

    op.create_table(
        'tickets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('table_id', sa.String(length=64), nullable=False),
        sa.Column('seat_no', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index(op.f('ix_tickets_order_id'), 'tickets', ['order_id'], unique=False)


def downgrade() -> None:
    op.drop_table('tickets')
    op.drop_column('orders', 'checked_in_at')
    op.drop_column('orders', 'payment_tx_id')
