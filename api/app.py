# api/app.py
# NOTE:
# /api/generate-plans always answers with plan data once the agent stream has
# been drained; the synthesizer guarantees a plan for any response text.
# Only failures of the agent invocation itself reach the client, as the
# {"error", "details"} body with status 500.

import uuid
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Body, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

# Use module import instead of direct function import for better testability
import agents.planner_agent as planner_agent

from agents.database import SessionStore
from agents.models import TravelRequest
from agents.travel_agent import create_travel_agent
from core.config import load_settings
from core.exceptions import AgentError
from core.health import full_health_check
from core.http_client import get_client, close_client
from core.logging_config import setup_logging
from core.request_context import set_request_id
from tools.storage import PlanStorage
from tools.travel_planning import build_travel_tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure structured JSON logging
    setup_logging()

    settings = load_settings()
    app.state.settings = settings
    app.state.plan_storage = PlanStorage(settings.storage_root)
    app.state.tools = build_travel_tools(app.state.plan_storage)

    app.state.session_store = None
    if settings.session_logging:
        try:
            store = SessionStore(settings.database_url)
            store.init()
            app.state.session_store = store
        except Exception:
            # Audit log is optional; planning works without it
            logger.exception("Session store unavailable, session logging disabled")

    # Do NOT fail startup without an API key; health reports the agent as failing
    app.state.agent = None
    if settings.agent_configured:
        app.state.agent = create_travel_agent(
            settings, app.state.tools, get_client(read_timeout=settings.agent_stream_timeout)
        )
        logger.info("Travel agent ready", extra={"model": settings.agent_model, "tools": app.state.tools.names})
    else:
        logger.error("ANTHROPIC_API_KEY not set; plan generation will fail until configured")

    yield

    await close_client()
    if app.state.session_store is not None:
        app.state.session_store.dispose()


app = FastAPI(
    title="AI Travel Planner",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Generate a unique request ID and store it in the context."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


def _error_response(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": error, "details": str(exc)})


@app.post("/api/generate-plans")
async def generate_plans(req: TravelRequest, request: Request):
    """Generate a travel plan for the request. Always returns plan data unless the agent call fails."""
    state = request.app.state
    try:
        return await planner_agent.generate_plans(
            req,
            agent=state.agent,
            settings=state.settings,
            session_store=state.session_store,
        )
    except AgentError as e:
        logger.error("Error generating plans", extra={"error": str(e)})
        return _error_response("Failed to generate plans", e)
    except Exception as e:
        logger.exception("Unexpected error in /api/generate-plans")
        return _error_response("Failed to generate plans", e)


@app.post("/api/save-to-notion")
async def save_to_notion(request: Request, plan: Dict[str, Any] = Body(...)):
    """Ask the agent to save a chosen plan to Notion."""
    state = request.app.state
    try:
        return await planner_agent.save_plan_to_notion(plan, agent=state.agent, settings=state.settings)
    except Exception as e:
        logger.exception("Error saving to Notion")
        return _error_response("Failed to save to Notion", e)


@app.get("/health/live")
async def liveness():
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@app.get("/health/ready")
async def readiness(request: Request):
    """Kubernetes readiness probe."""
    health = await full_health_check(request.app.state)
    if health["status"] != "ok":
        return Response(
            content=json.dumps(health),
            status_code=503,
            media_type="application/json"
        )
    return health


@app.get("/health")
async def health(request: Request):
    """Comprehensive health check for monitoring."""
    return await full_health_check(request.app.state)


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main():
    """Serve the API on port 8000 (the port the web client expects)."""
    import os
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
