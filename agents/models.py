"""
Pydantic models shared by the planner, the synthesizer and the tools.

Field names match the JSON the web client already consumes (snake_case).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BudgetTier(str, Enum):
    BUDGET = "budget"
    MODERATE = "moderate"
    LUXURY = "luxury"


class Mobility(str, Enum):
    WALKING = "walking"
    PUBLIC_TRANSPORT = "public_transport"
    CAR = "car"
    MIXED = "mixed"


class TravelRequest(BaseModel):
    """Validated inbound travel request. Immutable once received."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    destination: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Trip length in days")
    travelers: int = Field(..., gt=0)
    budget: BudgetTier
    interests: List[str] = Field(default_factory=list)
    mobility: Mobility
    accommodation_location: Optional[str] = None
    food_preference: Optional[str] = None
    allergies: Optional[str] = None
    special_requirements: Optional[str] = None

    @field_validator("destination")
    @classmethod
    def strip_destination(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("destination must not be blank")
        return v

    @field_validator("interests", mode="before")
    @classmethod
    def drop_blank_interests(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [i.strip() for i in v if isinstance(i, str) and i.strip()]
        return v


class PlanResult(BaseModel):
    """One structured travel plan."""
    mode_name: str
    mode_emoji: str
    daily_attractions: str
    pace: str
    daily_budget: str
    total_budget: str
    flexibility: str
    description: str
    detailed_plan: str
    debug_info: Optional[Dict[str, Any]] = None  # diagnostic only


class PlanData(BaseModel):
    """Top-level result returned to the caller."""
    plans: List[PlanResult]
    selected_mode: str
    full_ai_response: str
    debug_info: Dict[str, Any] = Field(default_factory=dict)
