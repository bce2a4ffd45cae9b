"""
Day reconciler: grows or shrinks the per-day maps to a new day count.

Shrinking discards the assignments, windows and generated text of the
removed days immediately. Growing back creates fresh empty days.
"""

import logging

from dayplanner.models.itinerary import DayAssignment, PlannerState
from dayplanner.services.day_store import check_day_count, default_time_window

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def apply_reconcile(state: PlannerState, days: int) -> PlannerState:
    check_day_count(days)

    assignments = {d: a for d, a in state.assignments.items() if d <= days}
    time_windows = {d: w for d, w in state.timeWindows.items() if d <= days}
    generated = {d: t for d, t in state.generated.items() if d <= days}

    for d in range(1, days + 1):
        if d not in assignments:
            assignments[d] = DayAssignment(day=d, spots=[])
        if d not in time_windows:
            time_windows[d] = default_time_window()
        if d not in generated:
            generated[d] = ""

    removed = sorted(d for d in state.assignments if d > days)
    if removed:
        logger.info(f"Day count reduced to {days}, discarding days {removed}")

    selected_day = state.selectedDay if state.selectedDay <= days else 1

    return state.evolve(
        days=days,
        selectedDay=selected_day,
        assignments=assignments,
        timeWindows=time_windows,
        generated=generated,
    )


def removed_days(before: PlannerState, after: PlannerState) -> list:
    return [d for d in before.day_numbers() if d > after.days]
