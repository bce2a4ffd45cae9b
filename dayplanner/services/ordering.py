"""
Ordering engine: edits to a single day's spot sequence.

Every operation renumbers the day so order values stay 1..len(spots).
Other days are never touched.
"""

import logging
from typing import List

from dayplanner.models.itinerary import AssignedSpot, DayAssignment, PlannerState, Point
from dayplanner.services.day_store import get_day, set_day

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _renumber(spots: List[AssignedSpot]) -> List[AssignedSpot]:
    return [s.model_copy(update={"order": i}) for i, s in enumerate(spots, start=1)]


def _with_spots(state: PlannerState, day: int, spots: List[AssignedSpot]) -> PlannerState:
    return set_day(state, day, DayAssignment(day=day, spots=_renumber(spots)))


def apply_add_to_day(state: PlannerState, day: int, point: Point) -> PlannerState:
    assignment = get_day(state, day)
    if point.id in assignment.point_ids():
        logger.info(f"Point {point.id} already on day {day}, nothing to add")
        return state

    added = AssignedSpot(
        pointId=point.id,
        name=point.name,
        lat=point.lat,
        lng=point.lng,
        order=len(assignment.spots) + 1,
    )
    return set_day(state, day, DayAssignment(day=day, spots=[*assignment.spots, added]))


def apply_remove_from_day(state: PlannerState, day: int, point_id: str) -> PlannerState:
    assignment = get_day(state, day)
    remaining = [s for s in assignment.spots if s.pointId != point_id]
    if len(remaining) == len(assignment.spots):
        return state
    return _with_spots(state, day, remaining)


def _swap(state: PlannerState, day: int, index: int, neighbour: int) -> PlannerState:
    assignment = get_day(state, day)
    spots = list(assignment.spots)
    if not (0 <= index < len(spots) and 0 <= neighbour < len(spots)):
        return state
    spots[index], spots[neighbour] = spots[neighbour], spots[index]
    return _with_spots(state, day, spots)


def apply_move_up(state: PlannerState, day: int, index: int) -> PlannerState:
    return _swap(state, day, index, index - 1)


def apply_move_down(state: PlannerState, day: int, index: int) -> PlannerState:
    return _swap(state, day, index, index + 1)
