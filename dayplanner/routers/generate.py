from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import logging

from dayplanner.exceptions import GenerationError, PlanValidationError
from dayplanner.models.generation import DayPlanRequest, PlanResponse, TripPlanRequest
from dayplanner.services.plan_service import PlanTextService, get_plan_text_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["generate"])

# Error bodies are top level: {"error"} for 400, {"error", "detail"} for 500
ERROR_RESPONSES = {
    400: {"description": "Invalid spots, days, destination or time window"},
    500: {"description": "Text generation failed or could not be reached"},
}


def _error_response(e: Exception) -> JSONResponse:
    if isinstance(e, PlanValidationError):
        return JSONResponse({"error": str(e)}, status_code=status.HTTP_400_BAD_REQUEST)
    return JSONResponse(
        {"error": str(e), "detail": e.detail},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@router.post("/generate-day", response_model=PlanResponse, responses=ERROR_RESPONSES)
async def generate_day(
    request: DayPlanRequest,
    service: PlanTextService = Depends(get_plan_text_service),
):
    """Plan text for one day from an ordered spot list"""
    try:
        plan = await service.generate_day_plan(request)
    except PlanValidationError as e:
        return _error_response(e)
    except GenerationError as e:
        logger.error(f"Day plan generation failed: {e}")
        return _error_response(e)
    return PlanResponse(plan=plan)


@router.post("/generate", response_model=PlanResponse, responses=ERROR_RESPONSES)
async def generate_trip(
    request: TripPlanRequest,
    service: PlanTextService = Depends(get_plan_text_service),
):
    """Plan text for a whole trip, from a destination or from a spot list"""
    try:
        plan = await service.generate_trip_plan(request)
    except PlanValidationError as e:
        return _error_response(e)
    except GenerationError as e:
        logger.error(f"Trip plan generation failed: {e}")
        return _error_response(e)
    return PlanResponse(plan=plan)
