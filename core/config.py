# core/config.py
"""
Runtime configuration.

Settings are read once at application startup (see api/app.py lifespan) and
passed explicitly to the components that need them. Nothing below api/ reads
the environment directly, so the planner, tools and storage stay testable
without touching process-wide state.

Environment variables (a `.env` file in the working directory is honoured):
    ANTHROPIC_API_KEY       - API key for the agent; the app starts without it
    AGENT_MODEL             - model used for plan generation
    AGENT_MAX_TOKENS        - max output tokens per agent turn
    AGENT_MAX_TURNS         - max tool-use rounds per task
    AGENT_STREAM_TIMEOUT    - seconds to wait for the agent stream to finish
    TRAVEL_PROMPT_PATH      - optional file overriding the built-in system prompt
    PLANS_STORAGE_ROOT      - directory for tool artifacts
    DATABASE_URL            - SQLAlchemy URL for the session audit log
    PLAN_SESSION_LOGGING    - "1" to record each planning run
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_AGENT_MODEL = "claude-sonnet-4-20250514"


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: Optional[str] = None
    agent_model: str = DEFAULT_AGENT_MODEL
    agent_max_tokens: int = 4096
    agent_max_turns: int = 8
    agent_stream_timeout: float = 180.0
    prompt_path: Optional[Path] = None
    storage_root: Path = Path("./travel-plans")
    database_url: str = "sqlite:///./local.db"
    session_logging: bool = True

    @property
    def agent_configured(self) -> bool:
        return bool(self.anthropic_api_key)


def load_settings() -> Settings:
    """Build Settings from the environment (after loading `.env`)."""
    load_dotenv()

    prompt_path = os.getenv("TRAVEL_PROMPT_PATH")

    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        agent_model=os.getenv("AGENT_MODEL", DEFAULT_AGENT_MODEL),
        agent_max_tokens=int(os.getenv("AGENT_MAX_TOKENS", "4096")),
        agent_max_turns=int(os.getenv("AGENT_MAX_TURNS", "8")),
        agent_stream_timeout=float(os.getenv("AGENT_STREAM_TIMEOUT", "180")),
        prompt_path=Path(prompt_path) if prompt_path else None,
        storage_root=Path(os.getenv("PLANS_STORAGE_ROOT", "./travel-plans")),
        database_url=os.getenv("DATABASE_URL") or "sqlite:///./local.db",
        session_logging=os.getenv("PLAN_SESSION_LOGGING", "1") == "1",
    )
