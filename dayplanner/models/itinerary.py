import re
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Dict, Any, List

TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")


# ---------------------------
# Core Models
# ---------------------------

class TransportMode(str, Enum):
    WALKING = "walk"
    TRANSIT = "public"


class Point(BaseModel):
    """A saved place from the user's bookmarks"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    lat: float
    lng: float


class AssignedSpot(BaseModel):
    model_config = ConfigDict(frozen=True)

    pointId: str
    name: str
    lat: float
    lng: float
    order: int = Field(..., ge=1)


class DayAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1)
    spots: List[AssignedSpot] = []

    def point_ids(self) -> List[str]:
        return [s.pointId for s in self.spots]


class TimeWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    startTime: str = "09:00"
    endTime: str = "17:00"

    def is_well_formed(self) -> bool:
        return bool(TIME_PATTERN.fullmatch(self.startTime)) and bool(TIME_PATTERN.fullmatch(self.endTime))

    def is_valid(self) -> bool:
        # zero-padded 24h strings compare correctly as text
        return self.is_well_formed() and self.startTime < self.endTime


class PlannerState(BaseModel):
    """
    Complete editable state of one itinerary.

    The assignment, time window and generated-text maps always carry exactly
    the day keys 1..days. Construction fails for any state that breaks this,
    so reducers build new states through the constructor instead of mutating.
    """
    model_config = ConfigDict(frozen=True)

    days: int = Field(..., ge=1)
    selectedDay: int = 1
    transport: TransportMode = TransportMode.TRANSIT
    assignments: Dict[int, DayAssignment] = {}
    timeWindows: Dict[int, TimeWindow] = {}
    generated: Dict[int, str] = {}

    @model_validator(mode="after")
    def check_invariants(self) -> "PlannerState":
        expected = set(range(1, self.days + 1))
        for name in ("assignments", "timeWindows", "generated"):
            keys = set(getattr(self, name).keys())
            if keys != expected:
                raise ValueError(
                    f"{name} day keys {sorted(keys)} do not match days 1..{self.days}"
                )

        for day, assignment in self.assignments.items():
            if assignment.day != day:
                raise ValueError(f"assignment stored under day {day} is labelled day {assignment.day}")
            orders = [s.order for s in assignment.spots]
            if orders != list(range(1, len(orders) + 1)):
                raise ValueError(f"day {day} order values {orders} are not 1..{len(orders)}")
            ids = assignment.point_ids()
            if len(set(ids)) != len(ids):
                raise ValueError(f"day {day} contains the same point more than once")

        if not 1 <= self.selectedDay <= self.days:
            raise ValueError(f"selected day {self.selectedDay} is outside 1..{self.days}")
        return self

    def evolve(self, **changes) -> "PlannerState":
        """Return a validated copy with the given fields replaced"""
        fields = {
            "days": self.days,
            "selectedDay": self.selectedDay,
            "transport": self.transport,
            "assignments": dict(self.assignments),
            "timeWindows": dict(self.timeWindows),
            "generated": dict(self.generated),
        }
        fields.update(changes)
        return PlannerState(**fields)

    def day_numbers(self) -> List[int]:
        return list(range(1, self.days + 1))


# ---------------------------
# Persisted Models
# ---------------------------

class DaySchedule(BaseModel):
    day: int = Field(..., ge=1)
    spots: List[AssignedSpot] = []
    planText: str = ""


class ItineraryDocument(BaseModel):
    title: str
    days: int = Field(..., ge=1)
    schedule: List[DaySchedule] = []
    createdAt: Optional[Any] = None


class DayView(BaseModel):
    day: int
    spots: List[AssignedSpot] = []
    planText: str = ""

    @property
    def has_plan(self) -> bool:
        return bool(self.planText)


class ItineraryView(BaseModel):
    planId: Optional[str] = None
    title: str
    days: int
    createdAt: Optional[Any] = None
    schedule: List[DayView] = []


# ---------------------------
# Request/Response Models
# ---------------------------

class SavePlanRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class SavePlanResponse(BaseModel):
    ok: bool = True
    planId: str


class ListPlansResponse(BaseModel):
    ok: bool = True
    plans: List[ItineraryView]
