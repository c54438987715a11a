"""
Natural-language task strings sent to the travel agent.
"""

from typing import Any, Dict

from agents.models import TravelRequest
from agents.travel_modes import ModeProfile


def compose_task(request: TravelRequest, mode: ModeProfile) -> str:
    """Render the plan-generation task for one travel request."""
    interests = ", ".join(request.interests)
    food = request.food_preference or "Any"

    return f"""Create a {mode.name} travel plan for {request.destination} ({request.duration} days, {request.travelers} travelers).

Budget: {request.budget}
Interests: {interests}
Food: {food}
Transport: {request.mobility}

Generate a detailed day-by-day itinerary with attractions, restaurants, timing, and costs.

Use the travel_plan_generator tool to create this plan.

Make sure to use the available tools (destination_research for research, notion_save for potential saving) and provide detailed, actionable travel plans."""


def compose_save_task(plan: Dict[str, Any]) -> str:
    """Render the task asking the agent to save a chosen plan to Notion."""
    return f"""Save this travel plan to Notion:

{plan.get("mode_name") or "Travel Plan"} for {plan.get("destination") or "Destination"} ({plan.get("duration") or "X"} days)
Budget: {plan.get("total_budget") or "Not specified"}

Use the notion_save tool, then create the Notion page with the returned payload."""
