"""Ledger entry rules, the balance fold and redemption status helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from wastewise.points.errors import InvalidTransition, ValidationError
from wastewise.points.ledger import CREDIT_KINDS, DEBIT_KINDS, validate_entry
from wastewise.points.projector import fold
from wastewise.rewards.schemas import RedemptionResponse
from wastewise.rewards.service import effective_status, validate_redemption_transition
from wastewise.store.service import validate_delivery_transition


class TestValidateEntry:
    @pytest.mark.parametrize("kind", sorted(CREDIT_KINDS))
    def test_credits_must_be_positive(self, kind):
        validate_entry(kind, 5)
        with pytest.raises(ValidationError):
            validate_entry(kind, -5)

    @pytest.mark.parametrize("kind", sorted(DEBIT_KINDS))
    def test_debits_must_be_negative(self, kind):
        validate_entry(kind, -5)
        with pytest.raises(ValidationError):
            validate_entry(kind, 5)

    def test_zero_rejected(self):
        with pytest.raises(ValidationError):
            validate_entry("earned", 0)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError, match="Unknown"):
            validate_entry("gift", 10)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError):
            validate_entry("earned", 1.5)
        with pytest.raises(ValidationError):
            validate_entry("earned", True)


class TestFold:
    def test_empty(self):
        assert fold([]) == 0

    def test_sum(self):
        entries = [SimpleNamespace(points=p) for p in (100, -80, 25, -5)]
        assert fold(entries) == 40


class TestRedemptionStatus:
    def test_active_to_used(self):
        validate_redemption_transition("active", "used")

    @pytest.mark.parametrize("status", ["used", "expired"])
    def test_terminal(self, status):
        with pytest.raises(InvalidTransition):
            validate_redemption_transition(status, "used")

    def test_lapsed_active_reads_as_expired(self):
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        redemption = SimpleNamespace(status="active", expiry_date=now - timedelta(seconds=1))
        assert effective_status(redemption, now) == "expired"

    def test_naive_expiry_treated_as_utc(self):
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        redemption = SimpleNamespace(status="active", expiry_date=datetime(2026, 5, 2))
        assert effective_status(redemption, now) == "active"

    def test_used_stays_used(self):
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        redemption = SimpleNamespace(status="used", expiry_date=now - timedelta(days=1))
        assert effective_status(redemption, now) == "used"


class TestRedemptionJson:
    def test_round_trip_preserves_code_status_and_expiry(self):
        issued = RedemptionResponse(
            id=7,
            user_id=3,
            reward_id=2,
            redemption_code="WWABCDEF1234",
            status="active",
            redeemed_at=datetime(2026, 4, 1, 9, 30, tzinfo=timezone.utc),
            expiry_date=datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc),
            ledger_entry_id=11,
            reward_title="Coffee voucher",
            points_spent=80,
        )
        restored = RedemptionResponse.model_validate_json(issued.model_dump_json())
        assert restored == issued
        assert restored.redemption_code == "WWABCDEF1234"
        assert restored.status == "active"
        assert restored.expiry_date == issued.expiry_date


class TestDeliveryTransitions:
    def test_happy_path(self):
        validate_delivery_transition("pending", "confirmed")
        validate_delivery_transition("confirmed", "shipped")
        validate_delivery_transition("shipped", "delivered")

    def test_cannot_cancel_shipped(self):
        with pytest.raises(InvalidTransition):
            validate_delivery_transition("shipped", "cancelled")

    def test_delivered_is_terminal(self):
        with pytest.raises(InvalidTransition):
            validate_delivery_transition("delivered", "cancelled")
