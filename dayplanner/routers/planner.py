from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from typing import Optional, List
import logging

from dayplanner.dependencies import get_current_uid, get_document_store, get_planner_session
from dayplanner.models.generation import DayGenerationState, GenerationResult, GenerationStatus
from dayplanner.models.itinerary import PlannerState, SavePlanRequest, SavePlanResponse, TransportMode
from dayplanner.services.document_store import DocumentStoreService
from dayplanner.services.planner_session import PlannerSession, get_planner_registry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["planner"])

# Request Models
class SetDaysRequest(BaseModel):
    days: int = Field(..., description="Total number of days (1-30)")

class SelectDayRequest(BaseModel):
    day: int = Field(..., ge=1)

class TransportRequest(BaseModel):
    transport: TransportMode

class TimeWindowRequest(BaseModel):
    startTime: Optional[str] = Field(None, description="Start time (HH:MM)")
    endTime: Optional[str] = Field(None, description="End time (HH:MM)")

class AddSpotRequest(BaseModel):
    pointId: str = Field(..., min_length=1)

# Response Models
class PlannerResponse(BaseModel):
    ok: bool = True
    state: PlannerState
    generation: List[DayGenerationState]

class GenerateDayResponse(BaseModel):
    ok: bool = True
    result: GenerationResult
    state: PlannerState


def _planner_response(session: PlannerSession) -> PlannerResponse:
    return PlannerResponse(
        state=session.state,
        generation=[session.generation_status(d) for d in session.state.day_numbers()],
    )


def _bad_request(e: ValueError):
    logger.warning(f"Rejected planner action: {e}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"status": "error", "message": str(e)}
    )


@router.get("/planner", response_model=PlannerResponse)
async def get_planner(session: PlannerSession = Depends(get_planner_session)):
    return _planner_response(session)


@router.delete("/planner", response_model=PlannerResponse)
async def reset_planner(uid: str = Depends(get_current_uid)):
    """Discard the caller's planner and start again with the default day count"""
    registry = get_planner_registry()
    registry.discard(uid)
    return _planner_response(registry.get_or_create(uid))


@router.put("/planner/days", response_model=PlannerResponse)
async def set_days(body: SetDaysRequest, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.set_days(body.days)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.put("/planner/selected-day", response_model=PlannerResponse)
async def select_day(body: SelectDayRequest, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.select_day(body.day)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.put("/planner/transport", response_model=PlannerResponse)
async def set_transport(body: TransportRequest, session: PlannerSession = Depends(get_planner_session)):
    session.set_transport(body.transport)
    return _planner_response(session)


@router.put("/planner/days/{day}/time-window", response_model=PlannerResponse)
async def set_time_window(day: int, body: TimeWindowRequest, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.set_time_window(day, body.startTime, body.endTime)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.post("/planner/days/{day}/spots", response_model=PlannerResponse)
async def add_spot(
    day: int,
    body: AddSpotRequest,
    uid: str = Depends(get_current_uid),
    session: PlannerSession = Depends(get_planner_session),
    store: DocumentStoreService = Depends(get_document_store),
):
    point = store.get_point(uid, body.pointId)
    if point is None:
        raise HTTPException(status_code=404, detail="Point not found")
    try:
        session.add_point(point, day)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.delete("/planner/days/{day}/spots/{pointId}", response_model=PlannerResponse)
async def remove_spot(day: int, pointId: str, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.remove_point(pointId, day)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.post("/planner/days/{day}/spots/{index}/move-up", response_model=PlannerResponse)
async def move_up(day: int, index: int, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.move_up(index, day)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.post("/planner/days/{day}/spots/{index}/move-down", response_model=PlannerResponse)
async def move_down(day: int, index: int, session: PlannerSession = Depends(get_planner_session)):
    try:
        session.move_down(index, day)
    except ValueError as e:
        raise _bad_request(e)
    return _planner_response(session)


@router.post("/planner/days/{day}/generate", response_model=GenerateDayResponse)
async def generate_day(day: int, session: PlannerSession = Depends(get_planner_session)):
    """
    Generate the plan text for one day from its spots, time window and the
    selected transport mode. The stored text for the day is replaced on success
    and left as it was on failure.
    """
    try:
        result = await session.generate_day(day)
    except ValueError as e:
        raise _bad_request(e)

    if result.status == GenerationStatus.FAILED and result.applied:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"status": "error", "message": result.error}
        )
    return GenerateDayResponse(result=result, state=session.state)


@router.post("/planner/days/{day}/acknowledge", response_model=PlannerResponse)
async def acknowledge(day: int, session: PlannerSession = Depends(get_planner_session)):
    session.acknowledge(day)
    return _planner_response(session)


@router.post("/planner/save", response_model=SavePlanResponse)
async def save_plan(
    body: SavePlanRequest,
    uid: str = Depends(get_current_uid),
    session: PlannerSession = Depends(get_planner_session),
    store: DocumentStoreService = Depends(get_document_store),
):
    document = session.to_document(body.title)
    plan_id = store.save_plan_for_user(uid, document)
    logger.info(f"Saved plan {plan_id} for user {uid} ({document.days} days)")
    return SavePlanResponse(ok=True, planId=plan_id)
