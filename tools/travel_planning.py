# tools/travel_planning.py
"""
Local travel planning tools offered to the agent:

- destination_research: sample attractions, restaurants, transport and local info
- travel_plan_generator: the three mode plans (flow, moderate, intense)
- notion_save: Notion page payload for a chosen plan

Data is templated, not researched; every tool saves its output as a JSON
artifact under the configured storage root.
"""

import json
import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agents.models import BudgetTier, TravelRequest
from agents.travel_modes import MODE_TABLE, calculate_total_budget
from tools.registry import Tool, ToolRegistry
from tools.storage import PlanStorage, safe_name, timestamp_ms

logger = logging.getLogger(__name__)

BUDGET_MULTIPLIERS = {
    BudgetTier.BUDGET.value: 0.7,
    BudgetTier.MODERATE.value: 1.0,
    BudgetTier.LUXURY.value: 1.5,
}
MAX_ATTRACTIONS = 8


# ----------------------------------------------------------------------
# Tool input models
# ----------------------------------------------------------------------
class DestinationResearchInput(BaseModel):
    destination: str = Field(..., description="Destination city and country")
    interests: List[str] = Field(default_factory=list, description="User interests for targeted research")
    budget_level: BudgetTier = Field(..., description="Budget level for appropriate recommendations")


class TravelPlanGeneratorInput(BaseModel):
    travel_request: TravelRequest = Field(..., description="Complete travel request with user preferences")


class NotionSaveInput(BaseModel):
    travel_plan: Dict[str, Any] = Field(..., description="Complete travel plan object to save")
    user_preferences: Dict[str, Any] = Field(..., description="Original user preferences and request")
    parent_page_id: Optional[str] = Field(None, description="Parent page ID in Notion where to create the travel plan page")


# ----------------------------------------------------------------------
# Destination research
# ----------------------------------------------------------------------
def generate_attractions(destination: str, interests: List[str], budget: str) -> List[Dict[str, Any]]:
    multiplier = BUDGET_MULTIPLIERS.get(budget, 1.0)

    def cost(base: int) -> str:
        return f"${round(base * multiplier)}"

    attractions = [
        {"name": f"{destination} Historic Center", "type": "Culture", "rating": 4.5,
         "description": "Explore the historic heart of the city", "estimated_cost": cost(15), "duration": "2-3 hours"},
        {"name": f"{destination} Art Museum", "type": "Art", "rating": 4.3,
         "description": "World-class art collection", "estimated_cost": cost(20), "duration": "2-4 hours"},
        {"name": f"{destination} Central Park", "type": "Nature", "rating": 4.6,
         "description": "Beautiful green space for relaxation", "estimated_cost": "Free", "duration": "1-3 hours"},
        {"name": f"{destination} Food Market", "type": "Food", "rating": 4.7,
         "description": "Local food and cultural experience", "estimated_cost": cost(25), "duration": "1-2 hours"},
        {"name": f"{destination} Observation Deck", "type": "Views", "rating": 4.4,
         "description": "Panoramic city views", "estimated_cost": cost(30), "duration": "1-2 hours"},
    ]

    if not interests:
        return attractions

    wanted = [i.lower() for i in interests]
    matching = [
        a for a in attractions
        if any(w in a["type"].lower() or w in a["description"].lower() for w in wanted)
    ]
    return matching[:MAX_ATTRACTIONS]


def generate_restaurants(destination: str, budget: str) -> List[Dict[str, Any]]:
    local_price = {"budget": "$", "luxury": "$$$"}.get(budget, "$$")
    fine_price = "$$" if budget == "budget" else "$$$"
    return [
        {"name": f"{destination} Local Bistro", "cuisine": "Local", "price_range": local_price,
         "rating": 4.4, "specialties": ["Traditional dishes", "Local ingredients"]},
        {"name": f"{destination} Street Food Corner", "cuisine": "Various", "price_range": "$",
         "rating": 4.6, "specialties": ["Quick bites", "Local street food"]},
        {"name": f"{destination} Fine Dining", "cuisine": "International", "price_range": fine_price,
         "rating": 4.8, "specialties": ["Gourmet cuisine", "Wine pairing"]},
    ]


def generate_transportation() -> Dict[str, List[Dict[str, str]]]:
    return {
        "options": [
            {"method": "Public Transport", "cost": "$8-15/day", "coverage": "Extensive city coverage"},
            {"method": "Walking", "cost": "Free", "coverage": "City center attractions"},
            {"method": "Taxi/Rideshare", "cost": "$10-25/trip", "coverage": "Door-to-door service"},
        ]
    }


def generate_local_info(destination: str) -> List[str]:
    return [
        f"{destination} is known for its rich culture and history",
        "Best time to visit is during shoulder seasons",
        "Local currency and payment methods widely accepted",
        "English is commonly spoken in tourist areas",
    ]


# ----------------------------------------------------------------------
# Mode plans
# ----------------------------------------------------------------------
def generate_mode_plans(request: TravelRequest) -> List[Dict[str, str]]:
    """One plan summary per travel mode, cheapest first."""
    plans = []
    for mode in MODE_TABLE.values():
        plans.append({
            "mode_name": mode.name,
            "mode_emoji": mode.emoji,
            "daily_attractions": mode.attractions_per_day,
            "pace": mode.pace,
            "daily_budget": mode.daily_budget,
            "total_budget": calculate_total_budget(mode.daily_budget, request.duration),
            "flexibility": mode.flexibility,
            "description": mode.description,
        })
    return plans


# ----------------------------------------------------------------------
# Notion page payload
# ----------------------------------------------------------------------
def _rich_text(content: str, **annotations: bool) -> Dict[str, Any]:
    item: Dict[str, Any] = {"type": "text", "text": {"content": content}}
    if annotations:
        item["annotations"] = annotations
    return item


def _heading(content: str) -> Dict[str, Any]:
    return {"type": "heading_2", "heading_2": {"rich_text": [_rich_text(content)]}}


def _paragraph(content: str, **annotations: bool) -> Dict[str, Any]:
    return {"type": "paragraph", "paragraph": {"rich_text": [_rich_text(content, **annotations)]}}


def _bullet(content: str) -> Dict[str, Any]:
    return {"type": "bulleted_list_item", "bulleted_list_item": {"rich_text": [_rich_text(content)]}}


def build_notion_page(
    travel_plan: Dict[str, Any],
    prefs: Dict[str, Any],
    parent_page_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Notion API `pages.create` payload for a travel plan."""
    mode_name = str(travel_plan.get("mode_name") or "Travel Plan")
    interests = [str(i) for i in prefs.get("interests") or []]

    children = [
        _heading("🎯 Trip Overview"),
        _paragraph(
            f"Destination: {prefs.get('destination')}\n"
            f"Duration: {prefs.get('duration')} days\n"
            f"Travelers: {prefs.get('travelers')}\n"
            f"Budget: {prefs.get('budget')}\n"
            f"Travel Mode: {mode_name}\n"
            f"Pace: {travel_plan.get('pace')}\n"
            f"Daily Budget: {travel_plan.get('daily_budget')}\n"
            f"Total Budget: {travel_plan.get('total_budget')}",
            bold=True,
        ),
        _heading("📅 Daily Itinerary"),
        _paragraph(travel_plan.get("detailed_plan") or "Detailed itinerary customized for your preferences."),
        _heading("🚗 Transportation Plan"),
        _paragraph(
            f"Primary Method: {prefs.get('mobility')} transportation options\n"
            f"Daily Transport Cost: Varies by method\n"
            f"Recommended for your travel style: {mode_name}",
            bold=True,
        ),
        _heading("💰 Budget Breakdown"),
        _bullet(f"Daily Budget: {travel_plan.get('daily_budget')}"),
        _bullet(f"Total Estimated Cost: {travel_plan.get('total_budget')}"),
        _heading("🎨 Your Preferences"),
        _paragraph(
            f"Interests: {', '.join(interests) or 'Various'}\n"
            f"Food Preferences: {prefs.get('food_preference') or 'No specific preferences'}\n"
            f"Allergies: {prefs.get('allergies') or 'None specified'}\n"
            f"Special Requirements: {prefs.get('special_requirements') or 'None'}"
        ),
        {"type": "divider", "divider": {}},
        _paragraph(
            f"📅 Created: {datetime.now(UTC).date().isoformat()}\n"
            f"🤖 Generated by: AI Travel Planner\n"
            f"💰 Total Trip Budget Estimate: {travel_plan.get('total_budget')} for "
            f"{prefs.get('travelers')} ({prefs.get('duration')} days)\n"
            f"🧳 Travel Style: {mode_name}\n"
            f"✈️ Perfect for {mode_name.lower()} travel experience!",
            italic=True,
        ),
    ]

    return {
        "parent": {"type": "page_id", "page_id": parent_page_id or "root"},
        "properties": {
            "title": {"title": [{"text": {"content": f"{prefs.get('destination')} Travel Plan - {mode_name}"}}]}
        },
        "children": children,
    }


# ----------------------------------------------------------------------
# Tool wiring
# ----------------------------------------------------------------------
def build_travel_tools(storage: PlanStorage) -> ToolRegistry:
    """Create the registry of travel tools writing artifacts to `storage`."""

    async def destination_research(args: DestinationResearchInput) -> Dict[str, Any]:
        budget = args.budget_level.value
        attractions = generate_attractions(args.destination, args.interests, budget)
        restaurants = generate_restaurants(args.destination, budget)
        transportation = generate_transportation()

        research = {
            "destination": args.destination,
            "attractions": attractions,
            "restaurants": restaurants,
            "transportation": transportation,
            "local_info": generate_local_info(args.destination),
            "research_timestamp": datetime.now(UTC).isoformat(),
        }
        path = await storage.save_json(f"{safe_name(args.destination)}_research.json", research)

        return {
            "message": f"Research completed for {args.destination}",
            "attractions_found": len(attractions),
            "restaurants_found": len(restaurants),
            "data_saved": str(path),
            "summary": {
                "top_attractions": [a["name"] for a in attractions[:5]],
                "cuisine_types": sorted({r["cuisine"] for r in restaurants}),
                "transport_options": transportation["options"],
            },
        }

    async def travel_plan_generator(args: TravelPlanGeneratorInput) -> Dict[str, Any]:
        request = args.travel_request
        plans = generate_mode_plans(request)
        request_id = timestamp_ms()
        path = await storage.save_json(
            f"{safe_name(request.destination)}_plans_{request_id}.json",
            {"travel_request": request.model_dump(), "plans": plans},
        )
        return {
            "message": "Travel plans generated successfully",
            "plans": plans,
            "request_id": str(request_id),
            "plans_saved": str(path),
        }

    async def notion_save(args: NotionSaveInput) -> str:
        plan, prefs = args.travel_plan, args.user_preferences
        payload = build_notion_page(plan, prefs, args.parent_page_id)
        page_title = payload["properties"]["title"]["title"][0]["text"]["content"]
        mode_name = str(plan.get("mode_name") or "Travel Plan")

        await storage.save_json(f"notion_{timestamp_ms()}.json", {
            "page_title": page_title,
            "payload": payload,
            "travel_plan": plan,
            "user_preferences": prefs,
            "created_at": datetime.now(UTC).isoformat(),
        })

        return (
            f"I'll create your travel plan page in Notion now! Let me save your \"{mode_name}\" "
            f"travel plan for {prefs.get('destination')}.\n\n"
            f"🔧 Using tool: notion_API-post-page\n"
            f"{json.dumps(payload, indent=2, ensure_ascii=False)}\n\n"
            f"This will create a comprehensive travel plan page with:\n"
            f"- 🎯 Trip Overview with all your preferences\n"
            f"- 📅 Detailed {prefs.get('duration')}-day itinerary\n"
            f"- 🚗 Transportation recommendations for {prefs.get('mobility')}\n"
            f"- 💰 Budget breakdown ({plan.get('total_budget')} total)\n"
            f"- 🎨 Your specific interests and requirements"
        )

    return ToolRegistry([
        Tool(
            name="destination_research",
            description="Research destination attractions, restaurants, and travel information",
            input_model=DestinationResearchInput,
            handler=destination_research,
        ),
        Tool(
            name="travel_plan_generator",
            description="Generate three different travel plans (flow, moderate, intense) based on user preferences",
            input_model=TravelPlanGeneratorInput,
            handler=travel_plan_generator,
        ),
        Tool(
            name="notion_save",
            description="Prepare a Notion page for the selected travel plan and keep a local copy",
            input_model=NotionSaveInput,
            handler=notion_save,
        ),
    ])
