# core/health.py

import asyncio
import os
from typing import Any, Dict


async def check_agent(state: Any) -> str:
    settings = getattr(state, "settings", None)
    agent = getattr(state, "agent", None)
    if settings is None or agent is None or not settings.agent_configured:
        return "fail"
    return "ok"


async def check_database(state: Any) -> str:
    store = getattr(state, "session_store", None)
    if store is None:
        # Session logging disabled; nothing to check
        return "ok"
    try:
        await asyncio.to_thread(store.ping)
        return "ok"
    except Exception:
        return "fail"


async def check_storage(state: Any) -> str:
    storage = getattr(state, "plan_storage", None)
    if storage is None:
        return "fail"
    try:
        await asyncio.to_thread(storage.root.mkdir, parents=True, exist_ok=True)
        return "ok" if os.access(storage.root, os.W_OK) else "fail"
    except OSError:
        return "fail"


async def full_health_check(state: Any) -> Dict:
    checks = {
        "agent": check_agent(state),
        "database": check_database(state),
        "storage": check_storage(state),
    }

    results = {}
    for name, check in checks.items():
        try:
            results[name] = await check
        except Exception:
            results[name] = "fail"

    overall = "ok" if all(v == "ok" for v in results.values()) else "degraded"

    return {
        "status": overall,
        "dependencies": results
    }
