"""Reports ledger.

One row per (reporter, target) flag. Rows are never deleted; resolution
only moves status away from 'pending'.

Revision ID: 002_reports
Revises: 001_baseline
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "002_reports"
down_revision: str | None = "001_baseline"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the reports table, its constraints and lookup indexes."""
    op.execute("""
        CREATE TABLE reports (
            id BIGSERIAL PRIMARY KEY,
            reporter_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            target_id VARCHAR(64) NOT NULL,
            target_type VARCHAR(16) NOT NULL,
            reason TEXT NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_reports_reporter_target UNIQUE (reporter_id, target_id, target_type),
            CONSTRAINT ck_reports_target_type
                CHECK (target_type IN ('post', 'comment', 'grid', 'profile', 'chat_message')),
            CONSTRAINT ck_reports_status
                CHECK (status IN ('pending', 'resolved_removed', 'resolved_ignored'))
        )
    """)
    op.execute("CREATE INDEX idx_reports_target ON reports(target_type, target_id)")
    op.execute("CREATE INDEX idx_reports_status_created ON reports(status, created_at)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS reports")
