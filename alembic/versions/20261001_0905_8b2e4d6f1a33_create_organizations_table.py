"""create_organizations_table

Revision ID: 8b2e4d6f1a33
Revises: 3f9a1c2b7d10
Create Date: 2026-10-01 09:05:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = '8b2e4d6f1a33'
down_revision: Union[str, None] = '3f9a1c2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create organizations table with plan and public profile columns."""
    op.create_table(
        'organizations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('owner_id', UUID(as_uuid=True), nullable=False),
        sa.Column(
            'plan',
            sa.Enum('FREE', 'PREMIUM', name='plan_tier', native_enum=False, length=16),
            nullable=False,
            server_default='FREE',
        ),
        sa.Column('plan_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('plan_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=160), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('whatsapp_number', sa.String(length=32), nullable=True),
        sa.Column('whatsapp_ordering_enabled', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_foreign_key(
        'organizations_owner_id_fkey',
        'organizations', 'users',
        ['owner_id'], ['id'],
        ondelete='RESTRICT',
    )

    op.create_index('idx_organizations_slug', 'organizations', ['slug'], unique=True)
    op.create_index('idx_organizations_owner_id', 'organizations', ['owner_id'])
    op.create_index('idx_organizations_plan_expires_at', 'organizations', ['plan_expires_at'])


def downgrade() -> None:
    """Drop organizations table."""
    op.drop_index('idx_organizations_plan_expires_at', table_name='organizations')
    op.drop_index('idx_organizations_owner_id', table_name='organizations')
    op.drop_index('idx_organizations_slug', table_name='organizations')
    op.drop_constraint('organizations_owner_id_fkey', 'organizations', type_='foreignkey')
    op.drop_table('organizations')
