"""
Travel mode table and budget arithmetic.

Each budget tier maps to exactly one ModeProfile. Lookups never fail:
an unknown or missing tier resolves to the moderate profile.
"""

from dataclasses import dataclass
from typing import Dict, Union

from agents.models import BudgetTier


@dataclass(frozen=True)
class ModeProfile:
    tier: BudgetTier
    name: str
    emoji: str
    attractions_per_day: str
    pace: str
    daily_budget: str  # "$<low>-<high>"
    flexibility: str
    description: str


MODE_TABLE: Dict[BudgetTier, ModeProfile] = {
    BudgetTier.BUDGET: ModeProfile(
        tier=BudgetTier.BUDGET,
        name="Going with the Flow",
        emoji="🌊",
        attractions_per_day="2-3",
        pace="Relaxed",
        daily_budget="$80-120",
        flexibility="High",
        description="Perfect for a relaxed exploration with plenty of time to soak in the atmosphere.",
    ),
    BudgetTier.MODERATE: ModeProfile(
        tier=BudgetTier.MODERATE,
        name="Moderate Explorer",
        emoji="⚖️",
        attractions_per_day="4-5",
        pace="Balanced",
        daily_budget="$120-180",
        flexibility="Medium",
        description="A balanced approach combining must-see attractions with local experiences.",
    ),
    BudgetTier.LUXURY: ModeProfile(
        tier=BudgetTier.LUXURY,
        name="Intense Adventure",
        emoji="🔥",
        attractions_per_day="6-8",
        pace="Fast-paced",
        daily_budget="$180-250",
        flexibility="Low",
        description="Maximum exploration with packed itineraries for comprehensive coverage.",
    ),
}

DEFAULT_TIER = BudgetTier.MODERATE


def resolve_mode(tier: Union[BudgetTier, str, None]) -> ModeProfile:
    """Return the profile for `tier`, falling back to moderate."""
    try:
        return MODE_TABLE[BudgetTier(tier)]
    except ValueError:
        return MODE_TABLE[DEFAULT_TIER]


def calculate_total_budget(daily_budget: str, duration: int) -> str:
    """
    Scale a "$<low>-<high>" daily band by the trip duration.

    The band must come from MODE_TABLE; a malformed band is a programming
    error and surfaces as the ValueError raised by int().
    """
    low, high = daily_budget.replace("$", "").split("-")
    return f"${int(low) * duration}-{int(high) * duration}"
