# core/exceptions.py
"""
Centralized exception definitions for the travel plan synthesizer.

Why this exists:
- Avoid circular imports between agents, tools and api
- Provide a common base exception (TravelPlannerError)
- Allow the API layer to map agent failures to the structured error body
- Improve testability
"""


# ============================================================
# Base Exceptions
# ============================================================

class TravelPlannerError(Exception):
    """
    Root base exception for the entire application.
    All custom exceptions should inherit from this.
    """
    pass


class AgentError(TravelPlannerError):
    """
    Base exception for failures of the agent collaborator
    (the Claude tool-use loop).
    """
    pass


class ToolError(TravelPlannerError):
    """
    Base exception for local tool failures
    (destination research, plan generator, notion save).
    """
    pass


# ============================================================
# Agent Related
# ============================================================

class AgentNotConfiguredError(AgentError):
    """
    Raised when a request needs the agent but no API key was configured.
    """
    pass


class AgentInvocationError(AgentError):
    """
    Raised when the agent invocation fails before or during streaming.
    Never retried; surfaced to the caller as {error, details}.
    """
    pass


# ============================================================
# Tool Related
# ============================================================

class ToolNotFoundError(ToolError):
    """
    Raised when the model asks for a tool that is not registered.
    """
    pass


class ToolInputError(ToolError):
    """
    Raised when tool input does not validate against the tool schema.
    """
    pass
