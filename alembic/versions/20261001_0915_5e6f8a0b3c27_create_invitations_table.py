"""create_invitations_table

Revision ID: 5e6f8a0b3c27
Revises: c41d7e9a2b58
Create Date: 2026-10-01 09:15:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "5e6f8a0b3c27"
down_revision: Union[str, None] = "c41d7e9a2b58"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create invitations table
    op.create_table(
        "invitations",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("org_id", UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.Enum(
                "owner",
                "manager",
                "cashier",
                "waiter",
                "kitchen",
                name="org_role",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    # Foreign keys
    op.create_foreign_key(
        "invitations_org_id_fkey",
        "invitations",
        "organizations",
        ["org_id"],
        ["id"],
        ondelete="CASCADE",
    )

    op.create_foreign_key(
        "invitations_created_by_fkey",
        "invitations",
        "users",
        ["created_by"],
        ["id"],
        ondelete="CASCADE",
    )

    # Indexes
    op.create_index("idx_invitations_org_id", "invitations", ["org_id"])
    op.create_index(
        "idx_invitations_token", "invitations", ["token"], unique=True
    )
    op.create_index("idx_invitations_email", "invitations", ["email"])


def downgrade() -> None:
    # Drop indexes
    op.drop_index("idx_invitations_email", table_name="invitations")
    op.drop_index("idx_invitations_token", table_name="invitations")
    op.drop_index("idx_invitations_org_id", table_name="invitations")

    # Drop foreign keys
    op.drop_constraint(
        "invitations_created_by_fkey",
        "invitations",
        type_="foreignkey",
    )
    op.drop_constraint(
        "invitations_org_id_fkey",
        "invitations",
        type_="foreignkey",
    )

    # Drop table
    op.drop_table("invitations")
