"""
Persistence adapter between PlannerState and the stored itinerary document.

Documents are written whole on save. Reading one back produces a view for
display only; it is not turned back into an editable state.
"""

from typing import Any, Dict, Mapping, Optional, Union

from dayplanner.models.itinerary import (
    DayAssignment,
    DaySchedule,
    DayView,
    ItineraryDocument,
    ItineraryView,
    PlannerState,
)


def build_document(
    title: str,
    days: int,
    assignments: Mapping[int, DayAssignment],
    generated: Mapping[int, str],
) -> ItineraryDocument:
    schedule = []
    for day in range(1, days + 1):
        assignment = assignments.get(day)
        schedule.append(DaySchedule(
            day=day,
            spots=list(assignment.spots) if assignment else [],
            planText=generated.get(day) or "",
        ))
    return ItineraryDocument(title=title, days=days, schedule=schedule)


def to_document(title: str, state: PlannerState) -> ItineraryDocument:
    return build_document(title, state.days, state.assignments, state.generated)


def from_document(
    doc: Union[ItineraryDocument, Dict[str, Any]],
    plan_id: Optional[str] = None,
) -> ItineraryView:
    if not isinstance(doc, ItineraryDocument):
        plan_id = plan_id or doc.get("planId")
        doc = ItineraryDocument.model_validate(doc)

    by_day = {entry.day: entry for entry in doc.schedule}
    schedule = []
    for day in range(1, doc.days + 1):
        entry = by_day.get(day)
        if entry is None:
            schedule.append(DayView(day=day))
            continue
        schedule.append(DayView(
            day=day,
            spots=sorted(entry.spots, key=lambda s: s.order),
            planText=entry.planText or "",
        ))

    return ItineraryView(
        planId=plan_id,
        title=doc.title,
        days=doc.days,
        createdAt=doc.createdAt,
        schedule=schedule,
    )
