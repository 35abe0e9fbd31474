"""create_memberships_table

Revision ID: c41d7e9a2b58
Revises: 8b2e4d6f1a33
Create Date: 2026-10-01 09:10:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = 'c41d7e9a2b58'
down_revision: Union[str, None] = '8b2e4d6f1a33'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORG_ROLES = ('owner', 'manager', 'cashier', 'waiter', 'kitchen')


def upgrade() -> None:
    op.create_table(
        'memberships',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('org_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column(
            'role',
            sa.Enum(*ORG_ROLES, name='org_role', native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_foreign_key(
        'memberships_org_id_fkey',
        'memberships', 'organizations',
        ['org_id'], ['id'],
        ondelete='CASCADE',
    )
    op.create_foreign_key(
        'memberships_user_id_fkey',
        'memberships', 'users',
        ['user_id'], ['id'],
        ondelete='CASCADE',
    )

    # One membership per user per restaurant; invitation acceptance relies on it
    op.create_unique_constraint('uq_memberships_org_user', 'memberships', ['org_id', 'user_id'])
    op.create_index('idx_memberships_org_id', 'memberships', ['org_id'])
    op.create_index('idx_memberships_user_id', 'memberships', ['user_id'])


def downgrade() -> None:
    op.drop_index('idx_memberships_user_id', table_name='memberships')
    op.drop_index('idx_memberships_org_id', table_name='memberships')
    op.drop_constraint('uq_memberships_org_user', 'memberships', type_='unique')
    op.drop_constraint('memberships_user_id_fkey', 'memberships', type_='foreignkey')
    op.drop_constraint('memberships_org_id_fkey', 'memberships', type_='foreignkey')
    op.drop_table('memberships')
