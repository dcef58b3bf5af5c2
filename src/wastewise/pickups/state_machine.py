"""Pickup lifecycle state machine and the completion award.

State progression: scheduled -> in_progress -> completed
Either non-terminal state may move to cancelled. completed and cancelled are
terminal: no transitions out of them.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from wastewise.points.errors import InvalidTransition, ValidationError

VALID_TRANSITIONS: dict[str, list[str]] = {
    "scheduled": ["in_progress", "cancelled"],
    "in_progress": ["completed", "cancelled"],
    "completed": [],
    "cancelled": [],
}

TERMINAL_STATES = frozenset(s for s, targets in VALID_TRANSITIONS.items() if not targets)

# Points per kilogram by waste type. Must match the rates shown when scheduling.
POINTS_PER_KG: dict[str, int] = {
    "plastic": 10,
    "paper": 5,
    "glass": 8,
    "metal": 15,
    "electronic": 25,
    "organic": 3,
    "mixed": 5,
}

WASTE_TYPES = frozenset(POINTS_PER_KG)


def validate_transition(current_status: str, target_status: str) -> None:
    """Validate a state transition. Raises InvalidTransition if invalid."""
    valid = VALID_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        raise InvalidTransition(
            f"Invalid transition: {current_status} -> {target_status}. "
            f"Valid transitions: {valid}"
        )


def rate_for(waste_type: str) -> int:
    """Points per kg for ``waste_type``."""
    try:
        return POINTS_PER_KG[waste_type]
    except KeyError:
        raise ValidationError(f"Unknown waste type: {waste_type}") from None


def parse_weight(weight_kg: Decimal | float | int | str | None) -> Decimal:
    """Coerce a measured weight to a positive Decimal with two places."""
    if weight_kg is None:
        raise ValidationError("actual_weight_kg is required to complete a pickup")
    try:
        weight = Decimal(str(weight_kg))
    except InvalidOperation:
        raise ValidationError(f"Invalid weight: {weight_kg!r}") from None
    if not weight.is_finite() or weight <= 0:
        raise ValidationError("actual_weight_kg must be a positive number")
    return weight.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def compute_points(waste_type: str, weight_kg: Decimal | float | int | str | None) -> int:
    """Points awarded for ``weight_kg`` of ``waste_type``, rounded half-up to an integer."""
    weight = parse_weight(weight_kg)
    points = (weight * rate_for(waste_type)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(points)
