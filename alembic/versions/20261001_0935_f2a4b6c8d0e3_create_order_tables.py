"""create_order_tables

Revision ID: f2a4b6c8d0e3
Revises: 6a8c0e2f4b19
Create Date: 2026-10-01 09:35:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = 'f2a4b6c8d0e3'
down_revision: Union[str, None] = '6a8c0e2f4b19'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('DRAFT', 'PLACED', 'ACCEPTED', 'PREPARING', 'READY', 'SERVED', 'CANCELLED')


def upgrade() -> None:
    """Create orders, order_items, payments and the per-org order counter."""
    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('table_id', UUID(as_uuid=True), nullable=True),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum(*ORDER_STATUSES, name='order_status', native_enum=False, length=16),
            nullable=False,
            server_default='PLACED',
        ),
        sa.Column('notes', sa.String(length=300), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'orders_org_id_fkey',
        'orders', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'orders_table_id_fkey',
        'orders', 'tables',
        ['table_id'], ['id'],
        ondelete='SET NULL'
    )
    op.create_unique_constraint('uq_orders_org_number', 'orders', ['org_id', 'number'])
    op.create_index('idx_orders_org_created_at', 'orders', ['org_id', 'created_at'])
    op.create_index('idx_orders_org_status', 'orders', ['org_id', 'status'])
    op.create_index('idx_orders_table_id', 'orders', ['table_id'])

    op.create_table(
        'order_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('menu_item_id', UUID(as_uuid=True), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=200), nullable=True),
    )
    op.create_foreign_key(
        'order_items_order_id_fkey',
        'order_items', 'orders',
        ['order_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'order_items_menu_item_id_fkey',
        'order_items', 'menu_items',
        ['menu_item_id'], ['id'],
        ondelete='RESTRICT'
    )
    op.create_index('idx_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('idx_order_items_menu_item_id', 'order_items', ['menu_item_id'])

    op.create_table(
        'payments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column(
            'method',
            sa.Enum('CASH', 'CARD', name='payment_method', native_enum=False, length=16),
            nullable=False,
            server_default='CASH',
        ),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'PAID', 'FAILED', name='payment_status', native_enum=False, length=16),
            nullable=False,
            server_default='PENDING',
        ),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'payments_order_id_fkey',
        'payments', 'orders',
        ['order_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'payments_org_id_fkey',
        'payments', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_index('idx_payments_order_id', 'payments', ['order_id'])
    op.create_index('idx_payments_org_id', 'payments', ['org_id'])

    op.create_table(
        'org_order_counters',
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('last_number', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_foreign_key(
        'org_order_counters_org_id_fkey',
        'org_order_counters', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_primary_key('org_order_counters_pkey', 'org_order_counters', ['org_id'])


def downgrade() -> None:
    op.drop_constraint('org_order_counters_org_id_fkey', 'org_order_counters', type_='foreignkey')
    op.drop_table('org_order_counters')

    op.drop_index('idx_payments_org_id', table_name='payments')
    op.drop_index('idx_payments_order_id', table_name='payments')
    op.drop_constraint('payments_org_id_fkey', 'payments', type_='foreignkey')
    op.drop_constraint('payments_order_id_fkey', 'payments', type_='foreignkey')
    op.drop_table('payments')

    op.drop_index('idx_order_items_menu_item_id', table_name='order_items')
    op.drop_index('idx_order_items_order_id', table_name='order_items')
    op.drop_constraint('order_items_menu_item_id_fkey', 'order_items', type_='foreignkey')
    op.drop_constraint('order_items_order_id_fkey', 'order_items', type_='foreignkey')
    op.drop_table('order_items')

    op.drop_index('idx_orders_table_id', table_name='orders')
    op.drop_index('idx_orders_org_status', table_name='orders')
    op.drop_index('idx_orders_org_created_at', table_name='orders')
    op.drop_constraint('uq_orders_org_number', 'orders', type_='unique')
    op.drop_constraint('orders_table_id_fkey', 'orders', type_='foreignkey')
    op.drop_constraint('orders_org_id_fkey', 'orders', type_='foreignkey')
    op.drop_table('orders')
