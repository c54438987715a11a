"""
Travel Agent (collaborator layer)

Runs a Claude tool-use loop for one task and exposes the conversation as a
one-shot async stream of ResponseEvents:

- one `text` event per streamed text delta
- one `turn_end` event (unknown arm) per model turn, with stop reason and usage
- one `tool_use` event per tool call the model makes
- one `message` event per tool-result turn sent back to the model

The loop ends when the model stops asking for tools or after `max_turns`
rounds. Errors from the Anthropic client propagate to the consumer; tool
failures are reported back to the model as error results instead.
"""

import logging
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from anthropic import AsyncAnthropic

from agents.events import ResponseEvent, parse_event
from core.config import Settings
from core.exceptions import ToolError
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are an expert travel planner.

You receive a travel request and produce one complete, actionable travel plan.
Use the destination_research tool to gather attractions, restaurants and
transport options, and the travel_plan_generator tool to obtain the budget
profile for each travel mode. Use notion_save only when asked to save a plan.

When the plan is ready, answer with a single JSON object and nothing else:

{
  "plans": [
    {
      "mode_name": "...",
      "mode_emoji": "...",
      "daily_attractions": "...",
      "pace": "...",
      "daily_budget": "...",
      "total_budget": "...",
      "flexibility": "...",
      "description": "...",
      "detailed_plan": "Day-by-day itinerary with timing, places, food and costs"
    }
  ],
  "selected_mode": "...",
  "full_ai_response": "..."
}
"""


def load_system_prompt(path: Optional[Path]) -> str:
    """Read the system prompt from `path`, or use the built-in one."""
    if path is None:
        return DEFAULT_SYSTEM_PROMPT
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("System prompt file unreadable, using built-in prompt", extra={"path": str(path)})
        return DEFAULT_SYSTEM_PROMPT


def _assistant_content(blocks: List[Any]) -> List[Dict[str, Any]]:
    """Convert response blocks into request params for the next turn."""
    content = []
    for block in blocks:
        if block.type == "text":
            content.append({"type": "text", "text": block.text})
        elif block.type == "tool_use":
            content.append({"type": "tool_use", "id": block.id, "name": block.name, "input": block.input})
    return content


class TravelAgent:
    def __init__(
        self,
        client: AsyncAnthropic,
        tools: ToolRegistry,
        *,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        model: str,
        max_tokens: int = 4096,
        max_turns: int = 8,
    ):
        self.client = client
        self.tools = tools
        self.system_prompt = system_prompt
        self.model = model
        self.max_tokens = max_tokens
        self.max_turns = max_turns

    async def _run_tool(self, name: str, tool_input: Dict[str, Any], tool_use_id: str) -> Dict[str, Any]:
        try:
            output = await self.tools.execute(name, tool_input)
            return {"type": "tool_result", "tool_use_id": tool_use_id, "content": output}
        except ToolError as e:
            logger.warning("Tool call rejected", extra={"tool": name, "error": str(e)})
            return {"type": "tool_result", "tool_use_id": tool_use_id, "content": str(e), "is_error": True}

    async def run_task(self, task: str, model: Optional[str] = None) -> AsyncIterator[ResponseEvent]:
        """Run `task` to completion, yielding events as they happen."""
        model = model or self.model
        messages: List[Dict[str, Any]] = [{"role": "user", "content": task}]
        tool_definitions = self.tools.definitions()

        for turn in range(1, self.max_turns + 1):
            async with self.client.messages.stream(
                model=model,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                messages=messages,
                tools=tool_definitions,
            ) as stream:
                async for event in stream:
                    if event.type == "text":
                        yield parse_event({"type": "text", "content": event.text})
                final = await stream.get_final_message()

            yield parse_event({
                "type": "turn_end",
                "turn": turn,
                "stop_reason": final.stop_reason,
                "usage": final.usage.model_dump() if final.usage else None,
            })

            tool_calls = [block for block in final.content if block.type == "tool_use"]
            if final.stop_reason != "tool_use" or not tool_calls:
                return

            messages.append({"role": "assistant", "content": _assistant_content(final.content)})

            results = []
            for call in tool_calls:
                yield parse_event({"type": "tool_use", "id": call.id, "name": call.name, "input": call.input})
                results.append(await self._run_tool(call.name, call.input, call.id))

            messages.append({"role": "user", "content": results})
            yield parse_event({"type": "message", "role": "user", "content": results})

        logger.warning("Agent stopped after max turns", extra={"max_turns": self.max_turns})


def create_travel_agent(settings: Settings, tools: ToolRegistry, http_client: httpx.AsyncClient) -> TravelAgent:
    client = AsyncAnthropic(api_key=settings.anthropic_api_key, http_client=http_client)
    return TravelAgent(
        client,
        tools,
        system_prompt=load_system_prompt(settings.prompt_path),
        model=settings.agent_model,
        max_tokens=settings.agent_max_tokens,
        max_turns=settings.agent_max_turns,
    )
