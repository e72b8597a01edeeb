"""Baseline: profiles and the content tables moderation reads.

In production these tables are created by the content subsystem; the
statements are guarded so the baseline can be stamped onto an existing
database as well as build a fresh one.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create profiles, posts, comments, grids and live_chat_messages."""
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            username VARCHAR(64) UNIQUE,
            email VARCHAR(320),
            role VARCHAR(16) NOT NULL DEFAULT 'user',
            points INTEGER NOT NULL DEFAULT 0,
            strikes INTEGER NOT NULL DEFAULT 0,
            banned_until TIMESTAMPTZ,
            profile_image_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    for table in ("posts", "comments", "grids"):
        op.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id UUID PRIMARY KEY,
                user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
        """)
        op.execute(f"CREATE INDEX IF NOT EXISTS ix_{table}_user_id ON {table}(user_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS live_chat_messages (
            id BIGSERIAL PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            track_id UUID,
            message TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    """Cannot downgrade from baseline."""
