from dayplanner.config import settings
from dayplanner.exceptions import PlanValidationError
from dayplanner.models.itinerary import TimeWindow


def validate_time_window(start_time: str, end_time: str) -> TimeWindow:
    """Both ends must be HH:MM and the start must come first"""
    window = TimeWindow(startTime=start_time or "", endTime=end_time or "")
    if not window.is_well_formed():
        raise PlanValidationError(
            f"Times must use the HH:MM format (got {start_time!r} to {end_time!r})"
        )
    if not window.is_valid():
        raise PlanValidationError(f"Start time {start_time} must be before end time {end_time}")
    return window


def validate_spots(spots) -> None:
    if not spots:
        raise PlanValidationError("No spots are assigned to this day. Add some from your saved places first.")


def validate_trip_days(days) -> None:
    if not isinstance(days, int) or days < 1:
        raise PlanValidationError("Number of days must be 1 or more")
    if days > settings.max_days:
        raise PlanValidationError(f"Number of days must be at most {settings.max_days}")
