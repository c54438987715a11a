import json

import pytest

from agents.models import TravelRequest
from agents.plan_synthesizer import (
    INCOMPLETE_JSON_ERROR,
    SynthesisTier,
    synthesize_plan,
)

TASK = "Create a Intense Adventure travel plan for Tokyo (3 days, 2 travelers). " + "x" * 300


def test_valid_json_is_returned_verbatim(travel_request):
    payload = {"plans": [{"mode_name": "Custom"}], "selected_mode": "Custom", "full_ai_response": "..."}
    outcome = synthesize_plan(f"Here you go:\n{json.dumps(payload)}\nEnjoy!", travel_request, TASK)

    assert outcome.tier is SynthesisTier.STRICT_JSON
    assert outcome.plan_data == payload
    assert outcome.failures == []


def test_strict_parse_runs_before_relaxed(travel_request):
    text = '{"selected_mode": "X", "travel_plan": {"destination": "Tokyo"}}'
    outcome = synthesize_plan(text, travel_request, TASK)

    assert outcome.tier is SynthesisTier.STRICT_JSON
    assert outcome.plan_data["selected_mode"] == "X"


def test_travel_plan_recovered_from_broken_json(travel_request):
    text = 'Plan: {"travel_plan": {"destination": "Paris", "days": 2}, broken}'
    outcome = synthesize_plan(text, travel_request, TASK)

    assert outcome.tier is SynthesisTier.RELAXED_TRAVEL_PLAN
    assert outcome.plan_data == {"travel_plan": {"destination": "Paris", "days": 2}}
    assert [tier for tier, _ in outcome.failures] == [SynthesisTier.STRICT_JSON]


def test_prose_response_is_wrapped(travel_request):
    text = "Day 1: Senso-ji in Tokyo. Day 2: Shibuya. Day 3: Tsukiji."
    outcome = synthesize_plan(text, travel_request, TASK)
    data = outcome.plan_data
    plan = data["plans"][0]

    assert outcome.tier is SynthesisTier.TEXT_RESPONSE
    assert plan["mode_name"] == "Intense Adventure"
    assert plan["total_budget"] == "$540-750"
    assert plan["flexibility"] == "Low"
    assert plan["detailed_plan"] == text
    assert plan["description"] == "Customized intense adventure plan for your luxury budget and preferences."
    assert data["selected_mode"] == "Intense Adventure"
    assert data["full_ai_response"] == text
    assert data["debug_info"]["has_destination"] is True
    assert data["debug_info"]["response_length"] == len(text)


def test_empty_response_gets_sample_plan(travel_request):
    outcome = synthesize_plan("", travel_request, TASK)
    data = outcome.plan_data
    plan = data["plans"][0]

    assert outcome.tier is SynthesisTier.EMPTY_RESPONSE
    assert plan["mode_name"] == "Intense Adventure"
    assert plan["daily_budget"] == "$180-250"
    assert plan["total_budget"] == "$540-750"
    assert plan["detailed_plan"] == "Sample plan for Tokyo - AI response was empty"
    assert data["full_ai_response"] == "No AI response received"
    assert data["debug_info"]["response_length"] == 0
    assert data["debug_info"]["task_sent"] == TASK[:200] + "..."
    assert data["debug_info"]["budget_selected"] == "luxury"


def test_malformed_json_falls_back_to_field_recovery(travel_request):
    text = 'Here is the plan: {"mode": "Flow", oops}'
    outcome = synthesize_plan(text, travel_request, TASK)
    data = outcome.plan_data
    debug = data["debug_info"]

    assert outcome.tier is SynthesisTier.FIELD_RECOVERY
    assert data["plans"][0]["detailed_plan"] == text
    assert data["full_ai_response"] == text
    assert debug["parse_error"]
    assert debug["extracted_info"] == {"destination": "Tokyo", "duration": 3, "mode": "Flow"}
    assert debug["json_extraction_failed"] is True
    assert debug["using_full_response_as_plan"] is True


def test_incomplete_json_recovers_labelled_fields(travel_request):
    text = 'Result: {"destination": "Kyoto", "duration": "4", "days": ['
    outcome = synthesize_plan(text, travel_request, TASK)
    debug = outcome.plan_data["debug_info"]

    assert outcome.tier is SynthesisTier.FIELD_RECOVERY
    assert debug["parse_error"] == INCOMPLETE_JSON_ERROR
    assert debug["extracted_info"]["destination"] == "Kyoto"
    assert debug["extracted_info"]["duration"] == "4"
    assert debug["extracted_info"]["mode"] == "Intense Adventure"
    assert outcome.plan_data["plans"][0]["description"] == "AI-generated intense adventure plan for Kyoto"


def test_root_parse_error_survives_relaxed_failure(travel_request):
    candidate = '{"travel_plan": {"a": oops}, x}'
    with pytest.raises(json.JSONDecodeError) as strict_error:
        json.loads(candidate)

    outcome = synthesize_plan(candidate, travel_request, TASK)

    assert outcome.tier is SynthesisTier.FIELD_RECOVERY
    assert outcome.plan_data["debug_info"]["parse_error"] == str(strict_error.value)
    assert [tier for tier, _ in outcome.failures][:2] == [
        SynthesisTier.STRICT_JSON,
        SynthesisTier.RELAXED_TRAVEL_PLAN,
    ]


def test_non_finite_constants_are_not_json(travel_request):
    text = 'Here: {"plans": [], "total": NaN}'
    outcome = synthesize_plan(text, travel_request, TASK)

    assert outcome.tier is SynthesisTier.FIELD_RECOVERY
    assert outcome.plan_data["debug_info"]["parse_error"] == "Invalid JSON constant: NaN"
    assert outcome.plan_data["full_ai_response"] == text


def test_non_finite_travel_plan_is_not_recovered(travel_request):
    text = '{"travel_plan": {"cost": Infinity}, broken}'
    outcome = synthesize_plan(text, travel_request, TASK)

    assert outcome.tier is SynthesisTier.FIELD_RECOVERY
    assert [tier for tier, _ in outcome.failures][:2] == [
        SynthesisTier.STRICT_JSON,
        SynthesisTier.RELAXED_TRAVEL_PLAN,
    ]


def test_unknown_budget_uses_moderate_profile():
    request = TravelRequest.model_construct(
        destination="Oslo", duration=5, travelers=1, budget="ultra",
        interests=[], mobility="walking", food_preference=None,
    )
    outcome = synthesize_plan("A lovely week in Oslo.", request, "task")
    plan = outcome.plan_data["plans"][0]

    assert plan["mode_name"] == "Moderate Explorer"
    assert plan["total_budget"] == "$600-900"
    assert plan["flexibility"] == "Medium"


@pytest.mark.parametrize("text", [
    "",
    "{",
    "}",
    "{{{",
    "}{",
    '{"a": [1, 2',
    "plain words",
    '{"a": 1}',
    "[1, 2, 3]",
    '{"travel_plan": {}}',
    "destination: mode: duration:",
    "\x00{}\x00",
    '{"plans": [], "total": NaN}',
    '{"a": Infinity}',
    '{"travel_plan": {"cost": -Infinity}, x}',
])
def test_synthesis_always_produces_plan_data(travel_request, text):
    outcome = synthesize_plan(text, travel_request, TASK)
    assert isinstance(outcome.plan_data, dict)
    assert outcome.tier in SynthesisTier
    json.dumps(outcome.plan_data, allow_nan=False)
