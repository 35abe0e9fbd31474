"""create_branding_and_opening_hours

Revision ID: 9d0a2c4e6f81
Revises: 5e6f8a0b3c27
Create Date: 2026-10-01 09:20:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = '9d0a2c4e6f81'
down_revision: Union[str, None] = '5e6f8a0b3c27'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'branding',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('brand_color', sa.String(length=7), nullable=False, server_default='#146E37'),
        sa.Column('accent_color', sa.String(length=7), nullable=False, server_default='#F9FAFB'),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'branding_org_id_fkey',
        'branding', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_index('idx_branding_org_id', 'branding', ['org_id'], unique=True)

    op.create_table(
        'opening_hours',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('open_time', sa.String(length=5), nullable=True),
        sa.Column('close_time', sa.String(length=5), nullable=True),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_opening_hours_day_of_week'),
    )
    op.create_foreign_key(
        'opening_hours_org_id_fkey',
        'opening_hours', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_unique_constraint('uq_opening_hours_org_day', 'opening_hours', ['org_id', 'day_of_week'])
    op.create_index('idx_opening_hours_org_id', 'opening_hours', ['org_id'])


def downgrade() -> None:
    op.drop_index('idx_opening_hours_org_id', table_name='opening_hours')
    op.drop_constraint('uq_opening_hours_org_day', 'opening_hours', type_='unique')
    op.drop_constraint('opening_hours_org_id_fkey', 'opening_hours', type_='foreignkey')
    op.drop_table('opening_hours')

    op.drop_index('idx_branding_org_id', table_name='branding')
    op.drop_constraint('branding_org_id_fkey', 'branding', type_='foreignkey')
    op.drop_table('branding')
