"""create_menu_tables

Revision ID: 6a8c0e2f4b19
Revises: 1b3c5d7e9f02
Create Date: 2026-10-01 09:30:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = '6a8c0e2f4b19'
down_revision: Union[str, None] = '1b3c5d7e9f02'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'menu_categories',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'menu_categories_org_id_fkey',
        'menu_categories', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_unique_constraint('uq_menu_categories_org_name', 'menu_categories', ['org_id', 'name'])
    op.create_index('idx_menu_categories_org_position', 'menu_categories', ['org_id', 'position'])

    op.create_table(
        'menu_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('category_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('price_cents > 0', name='ck_menu_items_price_positive'),
    )
    op.create_foreign_key(
        'menu_items_org_id_fkey',
        'menu_items', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'menu_items_category_id_fkey',
        'menu_items', 'menu_categories',
        ['category_id'], ['id'],
        ondelete='RESTRICT'
    )
    op.create_index('idx_menu_items_org_id', 'menu_items', ['org_id'])
    op.create_index('idx_menu_items_category_id', 'menu_items', ['category_id'])


def downgrade() -> None:
    op.drop_index('idx_menu_items_category_id', table_name='menu_items')
    op.drop_index('idx_menu_items_org_id', table_name='menu_items')
    op.drop_constraint('menu_items_category_id_fkey', 'menu_items', type_='foreignkey')
    op.drop_constraint('menu_items_org_id_fkey', 'menu_items', type_='foreignkey')
    op.drop_table('menu_items')

    op.drop_index('idx_menu_categories_org_position', table_name='menu_categories')
    op.drop_constraint('uq_menu_categories_org_name', 'menu_categories', type_='unique')
    op.drop_constraint('menu_categories_org_id_fkey', 'menu_categories', type_='foreignkey')
    op.drop_table('menu_categories')
