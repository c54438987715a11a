# core/metrics.py

import logging
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# ----------------------------
# Request Counters
# ----------------------------

PLAN_REQUESTS = Counter(
    "plan_requests_total",
    "Total plan generation requests",
    ["status"]  # success, error
)

SYNTHESIS_TIER = Counter(
    "plan_synthesis_tier_total",
    "Plans produced per synthesis tier",
    ["tier"]
)

TOOL_REQUESTS = Counter(
    "tool_requests_total",
    "Total local tool invocations",
    ["tool", "status"]
)

# ----------------------------
# Stream Metrics
# ----------------------------

STREAM_EVENTS = Counter(
    "agent_stream_events_total",
    "Agent response events observed by the stream consumer",
    ["event_type"]
)

STREAM_TIMEOUTS = Counter(
    "agent_stream_timeouts_total",
    "Agent streams cut off by the bounded wait"
)

# ----------------------------
# Latency Histograms
# ----------------------------

STREAM_LATENCY = Histogram(
    "agent_stream_latency_seconds",
    "Time spent draining one agent response stream"
)

TOOL_LATENCY = Histogram(
    "tool_request_latency_seconds",
    "Local tool latency",
    ["tool"]
)


# ----------------------------
# Helper Functions
# ----------------------------

def record_plan_request(status: str) -> None:
    PLAN_REQUESTS.labels(status=status).inc()


def record_synthesis_tier(tier: str) -> None:
    """Count which fallback tier produced the plan."""
    SYNTHESIS_TIER.labels(tier=tier).inc()


def record_stream_event(event_type: str) -> None:
    STREAM_EVENTS.labels(event_type=event_type).inc()


def record_stream_complete(duration_sec: float) -> None:
    STREAM_LATENCY.observe(duration_sec)


def record_stream_timeout() -> None:
    STREAM_TIMEOUTS.inc()


def record_tool_call(tool: str, status: str, duration_sec: float) -> None:
    """Record one tool invocation with its outcome and duration."""
    TOOL_REQUESTS.labels(tool=tool, status=status).inc()
    TOOL_LATENCY.labels(tool=tool).observe(duration_sec)
