"""Error taxonomy for ledger, redemption, pickup and store operations.

Each error carries the HTTP status the global handler responds with and a
stable machine-readable ``code``.
"""

from __future__ import annotations


class PointsError(Exception):
    """Base class for business errors surfaced to the caller."""

    status_code = 400
    code = "points_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PointsError):
    """Malformed input. The caller's fault; not retried."""

    status_code = 400
    code = "validation_error"


class NotFound(PointsError):
    """Referenced record does not exist or is not available."""

    status_code = 404
    code = "not_found"


class SoldOut(PointsError):
    """Reward has reached its redemption cap."""

    status_code = 409
    code = "sold_out"


class InsufficientPoints(PointsError):
    """Balance is lower than the amount to spend."""

    status_code = 409
    code = "insufficient_points"

    def __init__(self, required: int, balance: int) -> None:
        super().__init__(f"Insufficient points: {required} required, {balance} available")
        self.required = required
        self.balance = balance


class InvalidTransition(PointsError):
    """Lifecycle transition not allowed from the current state."""

    status_code = 409
    code = "invalid_transition"


class StoreUnavailable(PointsError):
    """Transient persistence failure. Safe to retry the whole operation."""

    status_code = 503
    code = "store_unavailable"
