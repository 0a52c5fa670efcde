"""repository_snapshots

Revision ID: 3f1c2a9d7e04
Revises:
Create Date: 2026-10-18 09:12:41.204117

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7e04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "repository_snapshots",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("provider", sa.String(16), nullable=False),
        sa.Column("organization", sa.String(), nullable=False),
        sa.Column("repository", sa.String(), nullable=False),
        sa.Column("version", sa.String(64), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider",
            "organization",
            "repository",
            "version",
            name="uq_repository_snapshots_key_version",
        ),
    )
    op.create_index(
        "idx_repository_snapshots_key_created_at",
        "repository_snapshots",
        ["provider", "organization", "repository", "created_at"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_repository_snapshots_key_created_at", table_name="repository_snapshots")
    op.drop_table("repository_snapshots")
