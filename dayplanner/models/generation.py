from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from dayplanner.models.itinerary import TransportMode


class SpotPayload(BaseModel):
    """What crosses the boundary for one spot: the final sequence carries the order"""
    name: str
    lat: float
    lng: float


class DayPlanRequest(BaseModel):
    transport: TransportMode = TransportMode.TRANSIT
    startTime: str = "09:00"
    endTime: str = "17:00"
    spots: List[SpotPayload] = []


class TripPlanRequest(BaseModel):
    mode: Literal["destination", "spots"] = "spots"
    destination: Optional[str] = None
    days: int = 1
    transport: TransportMode = TransportMode.TRANSIT
    startTime: str = "09:00"
    endTime: str = "17:00"
    spots: Optional[List[SpotPayload]] = None


class PlanResponse(BaseModel):
    plan: str


class GenerationStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DayGenerationState(BaseModel):
    day: int
    status: GenerationStatus = GenerationStatus.IDLE
    error: Optional[str] = None
    epoch: int = Field(0, ge=0)


class GenerationResult(BaseModel):
    """Outcome of one generate_day call; applied is False when a newer request superseded it"""
    day: int
    epoch: int
    status: GenerationStatus
    applied: bool = False
    text: Optional[str] = None
    error: Optional[str] = None
