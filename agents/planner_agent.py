"""
Planner Agent (Brain Layer)

Responsibilities:
- Resolve the travel mode and compose the agent task
- Drain the agent's response stream under a bounded wait
- Reconcile the response into plan data through the fallback synthesizer
- Persist an audit row per run

UI-agnostic, FastAPI-ready. Agent invocation failures surface as
AgentInvocationError; everything after the stream is drained is total.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional, Protocol, AsyncIterator, Tuple

import core.metrics as metrics
from agents.database import SessionStore
from agents.events import ResponseEvent
from agents.models import TravelRequest
from agents.plan_synthesizer import SynthesisOutcome, synthesize_plan
from agents.stream_consumer import StreamConsumer
from agents.task_composer import compose_save_task, compose_task
from agents.travel_modes import resolve_mode
from core.config import Settings
from core.exceptions import AgentInvocationError, AgentNotConfiguredError
from core.request_context import get_request_id

logger = logging.getLogger("planner_agent")

SESSION_WRITE_TIMEOUT = 5.0
RESPONSE_PREVIEW_CHARS = 500


class TaskRunner(Protocol):
    def run_task(self, task: str, model: Optional[str] = None) -> AsyncIterator[ResponseEvent]:
        ...


# ----------------------------------------------------------------------
# Stream draining with bounded wait
# ----------------------------------------------------------------------
async def run_agent_task(
    agent: Optional[TaskRunner],
    task: str,
    *,
    timeout: float,
    model: Optional[str] = None,
) -> Tuple[str, bool]:
    """
    Run `task` on the agent and return (accumulated_text, timed_out).

    When the wait exceeds `timeout` the stream is cancelled and the text
    received so far is returned. Any error raised by the agent is wrapped in
    AgentInvocationError.
    """
    if agent is None:
        raise AgentNotConfiguredError("ANTHROPIC_API_KEY is not set")

    consumer = StreamConsumer()
    deadline = asyncio.timeout(timeout)
    start = time.monotonic()
    timed_out = False

    try:
        async with deadline:
            await consumer.consume(agent.run_task(task, model))
    except TimeoutError as e:
        if not deadline.expired():
            raise AgentInvocationError(str(e) or "agent timed out") from e
        timed_out = True
        metrics.record_stream_timeout()
        logger.warning(
            f"Agent stream cut off after {timeout}s, reconciling partial response",
            extra={"events": consumer.event_count, "response_length": len(consumer.text)},
        )
    except Exception as e:
        logger.exception("Agent invocation failed")
        raise AgentInvocationError(str(e)) from e

    duration = time.monotonic() - start
    metrics.record_stream_complete(duration)

    text = consumer.text
    logger.info(
        "Agent stream drained",
        extra={
            "events": consumer.event_count,
            "response_length": len(text),
            "latency_sec": round(duration, 3),
            "preview": text[:RESPONSE_PREVIEW_CHARS],
        },
    )
    return text, timed_out


# ----------------------------------------------------------------------
# Public entry points
# ----------------------------------------------------------------------
async def generate_plans(
    request: TravelRequest,
    *,
    agent: Optional[TaskRunner],
    settings: Settings,
    session_store: Optional[SessionStore] = None,
) -> Dict[str, Any]:
    """Generate plan data for `request`. Always returns a plan once the stream ends."""
    mode = resolve_mode(request.budget)
    task = compose_task(request, mode)

    try:
        text, timed_out = await run_agent_task(
            agent, task, timeout=settings.agent_stream_timeout, model=settings.agent_model
        )
    except Exception:
        metrics.record_plan_request("error")
        raise

    outcome = synthesize_plan(text, request, task)
    metrics.record_synthesis_tier(outcome.tier.value)
    metrics.record_plan_request("success")
    logger.info(
        "Plan synthesized",
        extra={"tier": outcome.tier.value, "destination": request.destination, "timed_out": timed_out},
    )

    if session_store is not None:
        await _save_session(session_store, request, task, text, outcome, timed_out)

    return outcome.plan_data


async def save_plan_to_notion(
    plan: Dict[str, Any],
    *,
    agent: Optional[TaskRunner],
    settings: Settings,
) -> Dict[str, Any]:
    """Ask the agent to save a chosen plan via the notion_save tool."""
    task = compose_save_task(plan)
    text, timed_out = await run_agent_task(
        agent, task, timeout=settings.agent_stream_timeout, model=settings.agent_model
    )
    # A cut-off save may not have reached notion_save; never report it as done
    if timed_out:
        raise AgentInvocationError(
            f"Notion save did not finish within {settings.agent_stream_timeout}s"
        )
    return {
        "success": True,
        "message": "Travel plan saved to Notion successfully",
        "response": text,
    }


# ----------------------------------------------------------------------
# Session logging
# ----------------------------------------------------------------------
async def _save_session(
    store: SessionStore,
    request: TravelRequest,
    task: str,
    text: str,
    outcome: SynthesisOutcome,
    timed_out: bool,
) -> None:
    try:
        await asyncio.wait_for(
            asyncio.to_thread(
                store.save,
                request_id=get_request_id(),
                travel_request=request.model_dump(mode="json"),
                task=task,
                synthesis_tier=outcome.tier.value,
                response_length=len(text),
                stream_timed_out=timed_out,
                plan_data=outcome.plan_data,
            ),
            timeout=SESSION_WRITE_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.error("Database write timed out")
