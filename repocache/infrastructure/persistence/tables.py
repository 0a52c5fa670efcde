"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.types import JSON

metadata = MetaData()

# ============================================================================
# REPOSITORY SNAPSHOTS TABLE (immutable content per version)
# ============================================================================
repository_snapshots_table = Table(
    "repository_snapshots",
    metadata,
    Column("id", String, primary_key=True),
    Column("provider", String(16), nullable=False),  # Provider as string
    Column("organization", String, nullable=False),
    Column("repository", String, nullable=False),
    Column("version", String(64), nullable=False),
    Column("content", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint(
        "provider",
        "organization",
        "repository",
        "version",
        name="uq_repository_snapshots_key_version",
    ),
)

Index(
    "idx_repository_snapshots_key_created_at",
    repository_snapshots_table.c.provider,
    repository_snapshots_table.c.organization,
    repository_snapshots_table.c.repository,
    repository_snapshots_table.c.created_at,
)
