"""Recycling centers and issue reports.

Revision ID: 002_centers_and_issues
Revises: 001_initial
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "002_centers_and_issues"
down_revision: str | None = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS recycling_centers (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            address TEXT NOT NULL,
            city VARCHAR(64) NOT NULL,
            state VARCHAR(64) NOT NULL,
            pincode VARCHAR(16) NOT NULL,
            latitude NUMERIC(9, 6),
            longitude NUMERIC(9, 6),
            phone VARCHAR(32),
            email VARCHAR(320),
            operating_hours JSONB,
            waste_types_accepted JSONB NOT NULL DEFAULT '[]',
            capacity_tons NUMERIC(10, 2) NOT NULL DEFAULT 0,
            current_load_tons NUMERIC(10, 2) NOT NULL DEFAULT 0,
            rating NUMERIC(2, 1) NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_recycling_centers_active_name
        ON recycling_centers(name) WHERE is_active
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS issue_reports (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            issue_type VARCHAR(32) NOT NULL,
            title VARCHAR(200) NOT NULL,
            description TEXT NOT NULL,
            priority VARCHAR(16) NOT NULL DEFAULT 'medium',
            status VARCHAR(16) NOT NULL DEFAULT 'open',
            pickup_id BIGINT REFERENCES waste_pickups(id) ON DELETE SET NULL,
            center_id BIGINT REFERENCES recycling_centers(id) ON DELETE SET NULL,
            admin_notes TEXT,
            resolved_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_issue_reports_user_id
        ON issue_reports(user_id)
    """)

    # Leaderboard sums every user's entries.
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_ledger_entries_user_points
        ON ledger_entries(user_id, points)
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_ledger_entries_user_points")
    op.execute("DROP TABLE IF EXISTS issue_reports CASCADE")
    op.execute("DROP TABLE IF EXISTS recycling_centers CASCADE")
