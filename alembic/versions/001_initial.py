"""Initial schema.

Creates users, point_accounts, ledger_entries, rewards, redemptions,
waste_pickups, utilities and utility_purchases.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            full_name VARCHAR(128) NOT NULL,
            phone VARCHAR(32),
            address TEXT,
            city VARCHAR(64),
            user_type VARCHAR(16) NOT NULL DEFAULT 'individual',
            is_staff BOOLEAN NOT NULL DEFAULT false,
            is_banned BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_login TIMESTAMPTZ,
            login_count INTEGER NOT NULL DEFAULT 0
        )
    """)

    # --- Points ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS point_accounts (
            user_id BIGINT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            last_entry_id BIGINT,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS ledger_entries (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            kind VARCHAR(16) NOT NULL,
            points INTEGER NOT NULL,
            reference_type VARCHAR(16),
            reference_id BIGINT,
            description VARCHAR(256),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entries_nonzero CHECK (points <> 0)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_ledger_entries_user_created
        ON ledger_entries(user_id, created_at, id)
    """)

    # --- Rewards ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS rewards (
            id BIGSERIAL PRIMARY KEY,
            title VARCHAR(128) NOT NULL,
            description TEXT,
            points_required INTEGER NOT NULL,
            reward_type VARCHAR(16) NOT NULL DEFAULT 'voucher',
            value_amount NUMERIC(10, 2),
            vendor_name VARCHAR(128),
            terms_conditions TEXT,
            expiry_days INTEGER NOT NULL DEFAULT 30,
            max_redemptions INTEGER,
            current_redemptions INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_rewards_redemption_cap
                CHECK (max_redemptions IS NULL OR current_redemptions <= max_redemptions)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS redemptions (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            reward_id BIGINT NOT NULL REFERENCES rewards(id),
            redemption_code VARCHAR(16) UNIQUE NOT NULL,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            redeemed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            expiry_date TIMESTAMPTZ NOT NULL,
            used_at TIMESTAMPTZ,
            ledger_entry_id BIGINT UNIQUE NOT NULL REFERENCES ledger_entries(id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_redemptions_user_id
        ON redemptions(user_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_redemptions_active_expiry
        ON redemptions(expiry_date)
        WHERE status = 'active'
    """)

    # --- Pickups ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS waste_pickups (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL DEFAULT 'scheduled',
            waste_type VARCHAR(16) NOT NULL,
            pickup_date DATE NOT NULL,
            pickup_time VARCHAR(8) NOT NULL,
            pickup_address TEXT NOT NULL,
            special_instructions TEXT,
            estimated_weight_kg NUMERIC(8, 2),
            actual_weight_kg NUMERIC(8, 2),
            points_awarded INTEGER,
            driver_id BIGINT REFERENCES users(id),
            driver_notes TEXT,
            is_emergency BOOLEAN NOT NULL DEFAULT false,
            emergency_fee_points INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            completed_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_waste_pickups_user_id
        ON waste_pickups(user_id)
    """)

    # --- Eco store ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS utilities (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            description TEXT,
            category VARCHAR(32) NOT NULL DEFAULT 'other',
            price_points INTEGER NOT NULL,
            vendor_name VARCHAR(128),
            availability_status VARCHAR(16) NOT NULL DEFAULT 'available',
            is_active BOOLEAN NOT NULL DEFAULT true
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS utility_purchases (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            utility_id BIGINT NOT NULL REFERENCES utilities(id),
            quantity INTEGER NOT NULL,
            points_spent INTEGER NOT NULL,
            delivery_address TEXT NOT NULL,
            delivery_status VARCHAR(16) NOT NULL DEFAULT 'pending',
            tracking_number VARCHAR(64),
            ledger_entry_id BIGINT REFERENCES ledger_entries(id),
            refund_entry_id BIGINT REFERENCES ledger_entries(id),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_utility_purchases_user_id
        ON utility_purchases(user_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS utility_purchases CASCADE")
    op.execute("DROP TABLE IF EXISTS utilities CASCADE")
    op.execute("DROP TABLE IF EXISTS waste_pickups CASCADE")
    op.execute("DROP TABLE IF EXISTS redemptions CASCADE")
    op.execute("DROP TABLE IF EXISTS rewards CASCADE")
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE")
    op.execute("DROP TABLE IF EXISTS point_accounts CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
