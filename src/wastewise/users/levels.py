"""Eco levels derived from lifetime earned points.

These titles MUST match the rewards center labels in the web app.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Eco Starter", "cumulative": 0},
    {"level": 2, "title": "Green Helper", "cumulative": 100},
    {"level": 3, "title": "Recycling Ranger", "cumulative": 500},
    {"level": 4, "title": "Eco Warrior", "cumulative": 1500},
    {"level": 5, "title": "Planet Protector", "cumulative": 5000},
    {"level": 6, "title": "Earth Guardian", "cumulative": 15000},
]


def compute_level(lifetime_earned: int) -> dict:
    """Compute level info from lifetime earned points."""
    current = LEVEL_THRESHOLDS[0]
    next_level = LEVEL_THRESHOLDS[1]

    for i in range(len(LEVEL_THRESHOLDS) - 1):
        if lifetime_earned >= LEVEL_THRESHOLDS[i]["cumulative"]:
            current = LEVEL_THRESHOLDS[i]
            next_level = LEVEL_THRESHOLDS[i + 1]

    # Top level: nothing left to reach
    if lifetime_earned >= LEVEL_THRESHOLDS[-1]["cumulative"]:
        current = LEVEL_THRESHOLDS[-1]
        next_level = LEVEL_THRESHOLDS[-1]

    return {
        "level": current["level"],
        "title": current["title"],
        "next_level": next_level["level"],
        "next_title": next_level["title"],
        "points_to_next": max(0, next_level["cumulative"] - lifetime_earned),
    }
