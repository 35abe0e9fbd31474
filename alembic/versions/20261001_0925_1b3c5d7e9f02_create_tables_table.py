"""create_tables_table

Revision ID: 1b3c5d7e9f02
Revises: 9d0a2c4e6f81
Create Date: 2026-10-01 09:25:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = '1b3c5d7e9f02'
down_revision: Union[str, None] = '9d0a2c4e6f81'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create dining tables with QR token and floor-plan columns."""
    op.create_table(
        'tables',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('qr_token', sa.String(length=64), nullable=False),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('position_x', sa.Float(), nullable=False, server_default='0'),
        sa.Column('position_y', sa.Float(), nullable=False, server_default='0'),
        sa.Column('width', sa.Float(), nullable=False, server_default='80'),
        sa.Column('height', sa.Float(), nullable=False, server_default='80'),
        sa.Column(
            'shape',
            sa.Enum('square', 'round', 'rectangle', name='table_shape', native_enum=False, length=16),
            nullable=False,
            server_default='square',
        ),
        sa.Column('rotation', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_foreign_key(
        'tables_org_id_fkey',
        'tables', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE',
    )

    op.create_unique_constraint('uq_tables_org_number', 'tables', ['org_id', 'number'])
    op.create_index('idx_tables_org_id', 'tables', ['org_id'])
    op.create_index('idx_tables_qr_token', 'tables', ['qr_token'], unique=True)


def downgrade() -> None:
    """Drop tables table."""
    op.drop_index('idx_tables_qr_token', table_name='tables')
    op.drop_index('idx_tables_org_id', table_name='tables')
    op.drop_constraint('uq_tables_org_number', 'tables', type_='unique')
    op.drop_constraint('tables_org_id_fkey', 'tables', type_='foreignkey')
    op.drop_table('tables')
