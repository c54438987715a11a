"""
Plan synthesis from an accumulated agent response.

The agent is asked to answer with a structured plan but is free to reply with
anything: valid JSON, broken JSON, prose, or nothing at all. The synthesizer
walks an ordered list of strategies and returns the first plan one of them
produces:

1. strict JSON parse of the first balanced object
2. relaxed parse of a single-level "travel_plan" object inside that candidate
3. templated plan wrapping a prose answer verbatim
4. templated plan for an empty answer
5. templated plan with fields recovered from broken JSON by pattern matching

Strategy 5 has no preconditions and cannot fail, so `synthesize_plan` always
returns a plan and never raises.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from agents.json_extractor import ExtractionResult, ExtractionStatus, extract_balanced_json
from agents.models import PlanData, PlanResult, TravelRequest
from agents.travel_modes import ModeProfile, calculate_total_budget, resolve_mode

logger = logging.getLogger(__name__)

TRAVEL_PLAN_RE = re.compile(r'"travel_plan"\s*:\s*\{[^}]*\}')
DESTINATION_RE = re.compile(r"""destination['":\s]*([^,\n"'}]+)""", re.IGNORECASE)
DURATION_RE = re.compile(r"""duration['":\s]*([^,\n"'}]+)""", re.IGNORECASE)
MODE_RE = re.compile(r"""mode['":\s]*([^,\n"'}]+)""", re.IGNORECASE)

INCOMPLETE_JSON_ERROR = "Incomplete JSON in response"
TASK_PREVIEW_CHARS = 200


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON and cannot be rendered back to the client
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(candidate: str) -> Any:
    return json.loads(candidate, parse_constant=_reject_constant)


class SynthesisTier(str, Enum):
    STRICT_JSON = "strict_json"
    RELAXED_TRAVEL_PLAN = "relaxed_travel_plan"
    TEXT_RESPONSE = "text_response"
    EMPTY_RESPONSE = "empty_response"
    FIELD_RECOVERY = "field_recovery"


class StrategyResult(NamedTuple):
    plan_data: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.plan_data is not None


@dataclass
class SynthesisContext:
    text: str
    request: TravelRequest
    task: str
    extraction: ExtractionResult
    mode: ModeProfile
    failures: List[Tuple[SynthesisTier, str]] = field(default_factory=list)

    @property
    def root_error(self) -> Optional[str]:
        """Failure of the strict parse; later attempts never replace it."""
        for tier, reason in self.failures:
            if tier is SynthesisTier.STRICT_JSON:
                return reason
        return None


class SynthesisOutcome(NamedTuple):
    tier: SynthesisTier
    plan_data: Dict[str, Any]
    failures: List[Tuple[SynthesisTier, str]]


# ----------------------------------------------------------------------
# Templated plan construction
# ----------------------------------------------------------------------
def _build_plan_data(
    ctx: SynthesisContext,
    *,
    tier: SynthesisTier,
    description: str,
    detailed_plan: str,
    full_ai_response: str,
    debug_info: Dict[str, Any],
) -> Dict[str, Any]:
    mode = ctx.mode
    plan = PlanResult(
        mode_name=mode.name,
        mode_emoji=mode.emoji,
        daily_attractions=mode.attractions_per_day,
        pace=mode.pace,
        daily_budget=mode.daily_budget,
        total_budget=calculate_total_budget(mode.daily_budget, ctx.request.duration),
        flexibility=mode.flexibility,
        description=description,
        detailed_plan=detailed_plan,
    )
    data = PlanData(
        plans=[plan],
        selected_mode=mode.name,
        full_ai_response=full_ai_response,
        debug_info={**debug_info, "synthesis_tier": tier.value},
    )
    return data.model_dump(exclude_none=True)


# ----------------------------------------------------------------------
# Strategies
# ----------------------------------------------------------------------
def strict_parse(ctx: SynthesisContext) -> StrategyResult:
    if ctx.extraction.status is ExtractionStatus.NO_CANDIDATE:
        return StrategyResult(reason="No JSON object in response")
    if ctx.extraction.status is ExtractionStatus.INCOMPLETE:
        return StrategyResult(reason=INCOMPLETE_JSON_ERROR)

    try:
        parsed = _loads(ctx.extraction.candidate)
    except (ValueError, RecursionError) as e:
        return StrategyResult(reason=str(e))

    logger.info("Parsed structured plan data", extra={"candidate_length": len(ctx.extraction.candidate)})
    return StrategyResult(plan_data=parsed)


def relaxed_travel_plan_parse(ctx: SynthesisContext) -> StrategyResult:
    if ctx.extraction.status is not ExtractionStatus.FOUND:
        return StrategyResult(reason="no candidate to search")

    match = TRAVEL_PLAN_RE.search(ctx.extraction.candidate)
    if not match:
        return StrategyResult(reason="no travel_plan object in candidate")

    try:
        parsed = _loads("{" + match.group(0) + "}")
    except ValueError as e:
        return StrategyResult(reason=str(e))

    logger.info("Recovered travel_plan object from malformed JSON")
    return StrategyResult(plan_data=parsed)


def synthesize_from_text(ctx: SynthesisContext) -> StrategyResult:
    if ctx.extraction.status is not ExtractionStatus.NO_CANDIDATE or not ctx.text:
        return StrategyResult(reason="response is empty or contains JSON")

    request = ctx.request
    return StrategyResult(plan_data=_build_plan_data(
        ctx,
        tier=SynthesisTier.TEXT_RESPONSE,
        description=f"Customized {ctx.mode.name.lower()} plan for your {request.budget} budget and preferences.",
        detailed_plan=ctx.text,
        full_ai_response=ctx.text,
        debug_info={
            "response_length": len(ctx.text),
            "has_destination": request.destination in ctx.text,
            "budget_selected": request.budget,
        },
    ))


def synthesize_empty_response(ctx: SynthesisContext) -> StrategyResult:
    if ctx.text:
        return StrategyResult(reason="response is not empty")

    request = ctx.request
    return StrategyResult(plan_data=_build_plan_data(
        ctx,
        tier=SynthesisTier.EMPTY_RESPONSE,
        description=f"{ctx.mode.name} plan for your {request.budget} budget.",
        detailed_plan=f"Sample plan for {request.destination} - AI response was empty",
        full_ai_response="No AI response received",
        debug_info={
            "response_length": 0,
            "task_sent": ctx.task[:TASK_PREVIEW_CHARS] + "...",
            "budget_selected": request.budget,
        },
    ))


def _recover_field(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    return match.group(1).strip().replace('"', "").replace("'", "")


def reconcile_fields(ctx: SynthesisContext) -> Dict[str, Any]:
    """Last resort: wrap the raw response, salvaging a few labelled fields."""
    request = ctx.request
    destination = _recover_field(DESTINATION_RE, ctx.text) or request.destination
    duration = _recover_field(DURATION_RE, ctx.text) or request.duration
    mode_label = _recover_field(MODE_RE, ctx.text) or ctx.mode.name

    return _build_plan_data(
        ctx,
        tier=SynthesisTier.FIELD_RECOVERY,
        description=f"AI-generated {ctx.mode.name.lower()} plan for {destination}",
        detailed_plan=ctx.text,
        full_ai_response=ctx.text,
        debug_info={
            "response_length": len(ctx.text),
            "parse_error": ctx.root_error,
            "extracted_info": {
                "destination": destination,
                "duration": duration,
                "mode": mode_label,
            },
            "json_extraction_failed": True,
            "using_full_response_as_plan": True,
        },
    )


FALLBACK_STRATEGIES: List[Tuple[SynthesisTier, Callable[[SynthesisContext], StrategyResult]]] = [
    (SynthesisTier.STRICT_JSON, strict_parse),
    (SynthesisTier.RELAXED_TRAVEL_PLAN, relaxed_travel_plan_parse),
    (SynthesisTier.TEXT_RESPONSE, synthesize_from_text),
    (SynthesisTier.EMPTY_RESPONSE, synthesize_empty_response),
]


def synthesize_plan(text: str, request: TravelRequest, task: str) -> SynthesisOutcome:
    """Turn an accumulated agent response into plan data. Never raises."""
    ctx = SynthesisContext(
        text=text,
        request=request,
        task=task,
        extraction=extract_balanced_json(text),
        mode=resolve_mode(request.budget),
    )
    logger.info(
        "Synthesizing plan",
        extra={"response_length": len(text), "extraction": ctx.extraction.status.value},
    )

    for tier, strategy in FALLBACK_STRATEGIES:
        result = strategy(ctx)
        if result.ok:
            return SynthesisOutcome(tier, result.plan_data, ctx.failures)
        ctx.failures.append((tier, result.reason))
        logger.debug("Synthesis strategy skipped", extra={"tier": tier.value, "reason": result.reason})

    # Field recovery has no preconditions, so it closes the chain
    logger.warning("Structured parse failed, building plan from raw response", extra={"parse_error": ctx.root_error})
    return SynthesisOutcome(SynthesisTier.FIELD_RECOVERY, reconcile_fields(ctx), ctx.failures)
