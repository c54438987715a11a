# tools/registry.py
"""
Registry of local tools exposed to the travel agent.

Each tool declares a pydantic input model; the registry turns it into the
Anthropic tool definition and validates model-supplied input before calling
the handler.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Type

from pydantic import BaseModel, ValidationError

import core.metrics as metrics
from core.exceptions import ToolError, ToolInputError, ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[Any]]

    def definition(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_model.model_json_schema(),
        }


class ToolRegistry:
    def __init__(self, tools: List[Tool] | None = None):
        self._tools: Dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def definitions(self) -> List[Dict[str, Any]]:
        return [tool.definition() for tool in self._tools.values()]

    async def execute(self, name: str, raw_input: Dict[str, Any]) -> str:
        """
        Validate input, run the tool and return its result as text.

        Raises ToolNotFoundError, ToolInputError, or ToolError wrapping the
        handler's own failure.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Unknown tool: {name}")

        try:
            args = tool.input_model.model_validate(raw_input or {})
        except ValidationError as e:
            metrics.record_tool_call(name, "invalid_input", 0.0)
            raise ToolInputError(f"Invalid input for {name}: {e}") from e

        start = time.monotonic()
        try:
            result = await tool.handler(args)
        except Exception as e:
            metrics.record_tool_call(name, "error", time.monotonic() - start)
            logger.exception("Tool failed", extra={"tool": name})
            raise ToolError(f"Tool {name} failed: {e}") from e

        duration = time.monotonic() - start
        metrics.record_tool_call(name, "success", duration)
        logger.info("Tool completed", extra={"tool": name, "latency_sec": round(duration, 3)})

        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False, default=str)
