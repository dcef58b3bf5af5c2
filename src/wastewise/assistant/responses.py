"""Scripted assistant: keyword lookup over canned responses."""

from __future__ import annotations

GREETING = (
    "Hello! I'm your WasteWise assistant. I can help you optimize waste management, "
    "track your environmental impact, and provide personalized recommendations. "
    "How can I assist you today?"
)

QUICK_ACTIONS: list[str] = [
    "How can I reduce food waste?",
    "What's my carbon footprint?",
    "Show my waste analytics",
    "Tips for better recycling",
    "Nearest collection center",
    "Track my green goals",
]

# First matching row wins; keywords are matched against the lowercased message.
RESPONSES: list[tuple[tuple[str, ...], str]] = [
    (
        ("food waste", "reduce waste"),
        "Great question! Here are 3 effective ways to reduce food waste:\n\n"
        "1. **Plan your meals**: Create weekly meal plans and shopping lists\n"
        "2. **Store properly**: Use airtight containers and understand expiry dates\n"
        "3. **Compost scraps**: Turn unavoidable waste into nutrient-rich soil\n\n"
        "Implementing these could reduce your food waste by 40%!",
    ),
    (
        ("carbon", "footprint"),
        "Your waste-related carbon footprint drops with every pickup you recycle.\n\n"
        "To improve further:\n"
        "- Increase composting (+15% reduction)\n"
        "- Use public transport for waste drops (+10%)\n"
        "- Choose products with less packaging (+8%)",
    ),
    (
        ("analytics", "data"),
        "Your waste analytics live on the dashboard: pickups by waste type, "
        "weights collected and points earned per pickup. "
        "Would you like detailed breakdowns by waste type?",
    ),
    (
        ("recycling", "tips"),
        "Smart recycling tips:\n\n"
        "**Clean before recycling:**\n"
        "- Rinse containers to remove food residue\n"
        "- Remove labels when possible\n\n"
        "**Know your materials:**\n"
        "- Yes: paper, cardboard, glass, metals\n"
        "- No: plastic bags, styrofoam, electronics (schedule an electronic pickup instead)\n\n"
        "Need help finding the nearest recycling center?",
    ),
]

DEFAULT_RESPONSE = (
    "I understand you're asking about waste management! I'm here to help with:\n\n"
    "- Waste tracking & analytics\n"
    "- Recycling guidance\n"
    "- Sustainability tips\n"
    "- Local facility information\n"
    "- Goal setting & achievements\n\n"
    "Could you be more specific about what you'd like to know?"
)


def reply(message: str) -> str:
    """Return the canned response for ``message``."""
    text = message.lower()
    for keywords, response in RESPONSES:
        if any(keyword in text for keyword in keywords):
            return response
    return DEFAULT_RESPONSE
