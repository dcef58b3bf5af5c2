"""ORM models for users, the points ledger, rewards, pickups, the eco store,
recycling centers and issue reports.

Point balances are never stored. A user's balance is the sum of their
ledger_entries rows; point_accounts only anchors the per-user row lock.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wastewise.db.base import Base, BigIntPK, JSONType


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Registered application user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_type: Mapped[str] = mapped_column(String(16), nullable=False, server_default="individual")
    is_staff: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    login_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    account: Mapped[PointAccount | None] = relationship("PointAccount", back_populates="user", uselist=False)


# ---------------------------------------------------------------------------
# Points ledger
# ---------------------------------------------------------------------------


class PointAccount(Base):
    """Per-user anchor row locked around every balance-affecting transaction."""

    __tablename__ = "point_accounts"

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    last_entry_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship("User", back_populates="account")


class LedgerEntry(Base):
    """Immutable point-affecting event."""

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("points <> 0", name="ck_ledger_entries_nonzero"),
        Index("idx_ledger_entries_user_created", "user_id", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    reference_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------


class Reward(Base):
    """Reward that can be redeemed for points."""

    __tablename__ = "rewards"
    __table_args__ = (
        CheckConstraint(
            "max_redemptions IS NULL OR current_redemptions <= max_redemptions",
            name="ck_rewards_redemption_cap",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    points_required: Mapped[int] = mapped_column(Integer, nullable=False)
    reward_type: Mapped[str] = mapped_column(String(16), nullable=False, server_default="voucher")
    value_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    vendor_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    terms_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    expiry_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30, server_default="30")
    max_redemptions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_redemptions: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Redemption(Base):
    """A user's redeemed reward. Created in the same transaction as its ledger entry."""

    __tablename__ = "redemptions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reward_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("rewards.id"), nullable=False)
    redemption_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="active")
    redeemed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ledger_entry_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("ledger_entries.id"), unique=True, nullable=False
    )

    reward: Mapped[Reward] = relationship("Reward", lazy="joined")


# ---------------------------------------------------------------------------
# Pickups
# ---------------------------------------------------------------------------


class WastePickup(Base):
    """Scheduled waste pickup."""

    __tablename__ = "waste_pickups"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="scheduled")
    waste_type: Mapped[str] = mapped_column(String(16), nullable=False)
    pickup_date: Mapped[date] = mapped_column(Date, nullable=False)
    pickup_time: Mapped[str] = mapped_column(String(8), nullable=False)
    pickup_address: Mapped[str] = mapped_column(Text, nullable=False)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_weight_kg: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    actual_weight_kg: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    points_awarded: Mapped[int | None] = mapped_column(Integer, nullable=True)
    driver_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)
    driver_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_emergency: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    emergency_fee_points: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Eco store
# ---------------------------------------------------------------------------


class Utility(Base):
    """Eco-store catalog item priced in points."""

    __tablename__ = "utilities"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, server_default="other")
    price_points: Mapped[int] = mapped_column(Integer, nullable=False)
    vendor_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    availability_status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="available")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")


class UtilityPurchase(Base):
    """Eco-store order paid with points."""

    __tablename__ = "utility_purchases"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    utility_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("utilities.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    points_spent: Mapped[int] = mapped_column(Integer, nullable=False)
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)
    delivery_status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="pending")
    tracking_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ledger_entry_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("ledger_entries.id"), nullable=True)
    refund_entry_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("ledger_entries.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    utility: Mapped[Utility] = relationship("Utility", lazy="joined")


# ---------------------------------------------------------------------------
# Recycling centers
# ---------------------------------------------------------------------------


class RecyclingCenter(Base):
    """Drop-off facility and the waste types it takes."""

    __tablename__ = "recycling_centers"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(64), nullable=False)
    state: Mapped[str] = mapped_column(String(64), nullable=False)
    pincode: Mapped[str] = mapped_column(String(16), nullable=False)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    operating_hours: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    waste_types_accepted: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    capacity_tons: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    current_load_tons: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Issue reports
# ---------------------------------------------------------------------------


class IssueReport(Base):
    """A user's complaint about a pickup, a center or the service."""

    __tablename__ = "issue_reports"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    issue_type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, server_default="medium")
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="open")
    pickup_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("waste_pickups.id", ondelete="SET NULL"), nullable=True
    )
    center_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("recycling_centers.id", ondelete="SET NULL"), nullable=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
