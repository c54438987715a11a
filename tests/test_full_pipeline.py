import json

import pytest

import agents.planner_agent as planner_agent
from agents.database import SessionStore
from core.config import Settings
from core.exceptions import AgentInvocationError, AgentNotConfiguredError
from tests.conftest import FakeAgent, text_events

SETTINGS = Settings(anthropic_api_key="test-key", agent_stream_timeout=2.0)


@pytest.mark.asyncio
async def test_generate_plans_from_prose(travel_request):
    agent = FakeAgent(text_events("Day 1: Tokyo Tower. ", "Day 2: Asakusa."))

    data = await planner_agent.generate_plans(travel_request, agent=agent, settings=SETTINGS)

    assert data["plans"][0]["detailed_plan"] == "Day 1: Tokyo Tower. Day 2: Asakusa."
    assert data["debug_info"]["synthesis_tier"] == "text_response"
    assert "Tokyo (3 days, 2 travelers)" in agent.tasks[0]


@pytest.mark.asyncio
async def test_json_split_across_events_is_parsed(travel_request):
    payload = json.dumps({"plans": [], "selected_mode": "Intense Adventure", "full_ai_response": "ok"})
    half = len(payload) // 2
    agent = FakeAgent([
        {"type": "text", "content": payload[:half]},
        {"type": "tool_use", "id": "tu_1", "name": "travel_plan_generator", "input": {}},
        {"type": "turn_end", "turn": 1},
        {"type": "text", "content": payload[half:]},
    ])

    data = await planner_agent.generate_plans(travel_request, agent=agent, settings=SETTINGS)

    assert data == json.loads(payload)


@pytest.mark.asyncio
async def test_agent_failure_raises_invocation_error(travel_request):
    agent = FakeAgent(text_events("partial"), error=RuntimeError("boom"))

    with pytest.raises(AgentInvocationError, match="boom"):
        await planner_agent.generate_plans(travel_request, agent=agent, settings=SETTINGS)


@pytest.mark.asyncio
async def test_agent_raised_timeout_is_not_our_deadline(travel_request):
    agent = FakeAgent(error=TimeoutError("upstream timed out"))

    with pytest.raises(AgentInvocationError, match="upstream timed out"):
        await planner_agent.generate_plans(travel_request, agent=agent, settings=SETTINGS)


@pytest.mark.asyncio
async def test_missing_agent_raises_not_configured(travel_request):
    with pytest.raises(AgentNotConfiguredError):
        await planner_agent.generate_plans(travel_request, agent=None, settings=SETTINGS)


@pytest.mark.asyncio
async def test_stalled_stream_reconciles_partial_text(travel_request):
    agent = FakeAgent(text_events("Day 1: Meiji Shrine"), stall=10)
    settings = Settings(anthropic_api_key="test-key", agent_stream_timeout=0.2)

    text, timed_out = await planner_agent.run_agent_task(agent, "task", timeout=0.2)
    assert timed_out is True
    assert text == "Day 1: Meiji Shrine"

    data = await planner_agent.generate_plans(travel_request, agent=agent, settings=settings)
    assert data["full_ai_response"] == "Day 1: Meiji Shrine"
    assert data["debug_info"]["synthesis_tier"] == "text_response"


@pytest.mark.asyncio
async def test_stalled_empty_stream_yields_sample_plan(travel_request):
    agent = FakeAgent(stall=10)
    settings = Settings(anthropic_api_key="test-key", agent_stream_timeout=0.1)

    data = await planner_agent.generate_plans(travel_request, agent=agent, settings=settings)

    assert data["full_ai_response"] == "No AI response received"


@pytest.mark.asyncio
async def test_session_is_recorded(travel_request, tmp_path):
    store = SessionStore(f"sqlite:///{tmp_path / 'sessions.db'}")
    store.init()
    agent = FakeAgent(text_events("A trip to Tokyo."))

    await planner_agent.generate_plans(travel_request, agent=agent, settings=SETTINGS, session_store=store)

    assert store.count() == 1
    store.dispose()


@pytest.mark.asyncio
async def test_save_plan_to_notion_returns_agent_text():
    agent = FakeAgent(text_events("Saved your plan."))
    plan = {"mode_name": "Moderate Explorer", "destination": "Rome", "duration": 4}

    result = await planner_agent.save_plan_to_notion(plan, agent=agent, settings=SETTINGS)

    assert result == {
        "success": True,
        "message": "Travel plan saved to Notion successfully",
        "response": "Saved your plan.",
    }
    assert "Moderate Explorer for Rome (4 days)" in agent.tasks[0]


@pytest.mark.asyncio
async def test_save_plan_to_notion_cut_off_is_not_success():
    agent = FakeAgent(text_events("partial"), stall=10)
    settings = Settings(anthropic_api_key="test-key", agent_stream_timeout=0.1)

    with pytest.raises(AgentInvocationError, match="did not finish"):
        await planner_agent.save_plan_to_notion({"mode_name": "Moderate Explorer"}, agent=agent, settings=settings)
