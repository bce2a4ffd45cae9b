"""
Day assignment store.

Plain accessors over PlannerState keyed by day number. These functions do not
check ordering or duplicate rules themselves; the ordering engine and the
reconciler keep those, and PlannerState rejects any result that breaks them.
"""

import logging
from typing import Optional

from dayplanner.config import settings
from dayplanner.exceptions import PlanValidationError
from dayplanner.models.itinerary import DayAssignment, PlannerState, TimeWindow, TransportMode

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def default_time_window() -> TimeWindow:
    return TimeWindow(startTime=settings.default_start_time, endTime=settings.default_end_time)


def initial_state(days: Optional[int] = None) -> PlannerState:
    """Fresh state with empty days, default windows and nothing generated"""
    days = settings.default_days if days is None else days
    check_day_count(days)
    day_range = range(1, days + 1)
    return PlannerState(
        days=days,
        selectedDay=1,
        transport=TransportMode(settings.default_transport),
        assignments={d: DayAssignment(day=d, spots=[]) for d in day_range},
        timeWindows={d: default_time_window() for d in day_range},
        generated={d: "" for d in day_range},
    )


def check_day_count(days: int):
    if not isinstance(days, int) or days < 1:
        raise PlanValidationError(f"Day count must be a positive integer, got {days!r}")
    if days > settings.max_days:
        raise PlanValidationError(f"Day count must be at most {settings.max_days}, got {days}")


def check_day(state: PlannerState, day: int):
    if day not in state.assignments:
        raise PlanValidationError(f"Day {day} is outside 1..{state.days}")


def get_day(state: PlannerState, day: int) -> DayAssignment:
    check_day(state, day)
    return state.assignments[day]


def set_day(state: PlannerState, day: int, assignment: DayAssignment) -> PlannerState:
    check_day(state, day)
    assignments = dict(state.assignments)
    assignments[day] = assignment
    return state.evolve(assignments=assignments)


def get_time_window(state: PlannerState, day: int) -> TimeWindow:
    check_day(state, day)
    return state.timeWindows[day]


def apply_set_time_window(
    state: PlannerState,
    day: int,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> PlannerState:
    """
    Update one or both ends of a day's window.

    Edits arrive one field at a time, so a window may pass through
    start >= end while the user types; generation is where it must be valid.
    """
    current = get_time_window(state, day)
    window = TimeWindow(
        startTime=current.startTime if start_time is None else start_time,
        endTime=current.endTime if end_time is None else end_time,
    )
    time_windows = dict(state.timeWindows)
    time_windows[day] = window
    return state.evolve(timeWindows=time_windows)


def apply_set_transport(state: PlannerState, transport: TransportMode) -> PlannerState:
    return state.evolve(transport=TransportMode(transport))


def apply_select_day(state: PlannerState, day: int) -> PlannerState:
    check_day(state, day)
    return state.evolve(selectedDay=day)


def apply_generated_text(state: PlannerState, day: int, text: str) -> PlannerState:
    """Overwrite the plan text for a day"""
    check_day(state, day)
    generated = dict(state.generated)
    generated[day] = text
    return state.evolve(generated=generated)
