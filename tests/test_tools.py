import json

import pytest
from pydantic import BaseModel

from agents.models import TravelRequest
from core.exceptions import ToolError, ToolInputError, ToolNotFoundError
from tools.registry import Tool, ToolRegistry
from tools.storage import PlanStorage, safe_name
from tools.travel_planning import (
    build_notion_page,
    build_travel_tools,
    generate_attractions,
    generate_mode_plans,
)


@pytest.fixture
def storage(tmp_path):
    return PlanStorage(tmp_path / "plans")


@pytest.fixture
def registry(storage):
    return build_travel_tools(storage)


def test_safe_name():
    assert safe_name("São Paulo, BR") == "S_o_Paulo__BR"


def test_attractions_filtered_by_interest():
    attractions = generate_attractions("Tokyo", ["food"], "moderate")
    assert [a["name"] for a in attractions] == ["Tokyo Food Market"]
    assert attractions[0]["estimated_cost"] == "$25"


def test_attraction_costs_follow_budget():
    attractions = generate_attractions("Tokyo", [], "luxury")
    costs = {a["type"]: a["estimated_cost"] for a in attractions}
    assert costs["Art"] == "$30"
    assert costs["Nature"] == "Free"


def test_mode_plans_cover_every_mode():
    request = TravelRequest(destination="Rome", duration=5, travelers=2, budget="moderate", mobility="walking")
    plans = generate_mode_plans(request)
    assert [p["total_budget"] for p in plans] == ["$400-600", "$600-900", "$900-1250"]
    assert [p["mode_name"] for p in plans] == ["Going with the Flow", "Moderate Explorer", "Intense Adventure"]


def test_registry_exposes_tool_definitions(registry):
    definitions = {d["name"]: d for d in registry.definitions()}
    assert set(definitions) == {"destination_research", "travel_plan_generator", "notion_save"}
    for definition in definitions.values():
        assert definition["input_schema"]["type"] == "object"
        assert definition["description"]


def test_duplicate_tool_rejected():
    class Args(BaseModel):
        pass

    async def handler(args):
        return "ok"

    tool = Tool(name="t", description="d", input_model=Args, handler=handler)
    with pytest.raises(ValueError):
        ToolRegistry([tool, tool])


@pytest.mark.asyncio
async def test_plan_generator_saves_artifact(registry, storage):
    output = await registry.execute("travel_plan_generator", {
        "travel_request": {
            "destination": "New York",
            "duration": 3,
            "travelers": 2,
            "budget": "luxury",
            "mobility": "public_transport",
        }
    })
    result = json.loads(output)

    assert len(result["plans"]) == 3
    saved = list(storage.root.glob("New_York_plans_*.json"))
    assert len(saved) == 1
    assert json.loads(saved[0].read_text(encoding="utf-8"))["plans"] == result["plans"]


@pytest.mark.asyncio
async def test_destination_research(registry, storage):
    output = await registry.execute("destination_research", {
        "destination": "Lisbon",
        "interests": ["views"],
        "budget_level": "budget",
    })
    result = json.loads(output)

    assert result["attractions_found"] == 1
    assert result["summary"]["top_attractions"] == ["Lisbon Observation Deck"]
    assert (storage.root / "Lisbon_research.json").exists()


@pytest.mark.asyncio
async def test_notion_save_returns_payload_text(registry, storage):
    output = await registry.execute("notion_save", {
        "travel_plan": {"mode_name": "Moderate Explorer", "total_budget": "$360-540"},
        "user_preferences": {"destination": "Tokyo", "duration": 3, "mobility": "car"},
    })

    assert "Moderate Explorer" in output
    assert "Tokyo Travel Plan - Moderate Explorer" in output
    assert len(list(storage.root.glob("notion_*.json"))) == 1


@pytest.mark.asyncio
async def test_unknown_tool(registry):
    with pytest.raises(ToolNotFoundError):
        await registry.execute("weather", {})


@pytest.mark.asyncio
async def test_invalid_tool_input(registry):
    with pytest.raises(ToolInputError):
        await registry.execute("destination_research", {"destination": "Tokyo", "budget_level": "ultra"})


@pytest.mark.asyncio
async def test_handler_failure_wrapped():
    class Args(BaseModel):
        pass

    async def handler(args):
        raise RuntimeError("disk full")

    registry = ToolRegistry([Tool(name="broken", description="d", input_model=Args, handler=handler)])
    with pytest.raises(ToolError, match="disk full"):
        await registry.execute("broken", {})


def test_notion_page_structure():
    page = build_notion_page(
        {"mode_name": "Intense Adventure", "detailed_plan": "Day 1"},
        {"destination": "Tokyo", "interests": ["food", "art"]},
    )

    assert page["parent"] == {"type": "page_id", "page_id": "root"}
    assert page["properties"]["title"]["title"][0]["text"]["content"] == "Tokyo Travel Plan - Intense Adventure"
    headings = [
        c["heading_2"]["rich_text"][0]["text"]["content"]
        for c in page["children"] if c["type"] == "heading_2"
    ]
    assert headings[0] == "🎯 Trip Overview"
    assert "💰 Budget Breakdown" in headings


def test_notion_page_uses_parent_id():
    page = build_notion_page({}, {"destination": "Rome"}, parent_page_id="abc123")
    assert page["parent"]["page_id"] == "abc123"
