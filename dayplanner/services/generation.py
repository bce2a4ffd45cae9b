"""
Generation orchestrator: one plan-generation request per day.

Each day moves idle -> generating -> succeeded | failed and back to idle once
the outcome has been acknowledged. Requests for the same day are not
serialised; instead every request takes the next epoch for its day and its
response is only applied while that epoch is still the latest one issued.
Results are keyed strictly by day, so days never overwrite each other.
"""

import logging
from typing import Dict, Iterable

from dayplanner.exceptions import GenerationError
from dayplanner.models.generation import (
    DayGenerationState,
    DayPlanRequest,
    GenerationResult,
    GenerationStatus,
    SpotPayload,
)
from dayplanner.models.itinerary import PlannerState
from dayplanner.services.day_store import apply_generated_text, get_day, get_time_window
from dayplanner.services.validation import validate_spots, validate_time_window

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def build_day_request(state: PlannerState, day: int) -> DayPlanRequest:
    """
    Validate a day and build the request for it.

    Raises PlanValidationError for an unknown day, an empty spot list or a bad
    time window. Nothing is sent in those cases.
    """
    assignment = get_day(state, day)
    validate_spots(assignment.spots)
    window = get_time_window(state, day)
    validate_time_window(window.startTime, window.endTime)

    return DayPlanRequest(
        transport=state.transport,
        startTime=window.startTime,
        endTime=window.endTime,
        spots=[SpotPayload(name=s.name, lat=s.lat, lng=s.lng) for s in assignment.spots],
    )


class GenerationOrchestrator:
    """Drives per-day generation against a holder that owns the current PlannerState"""

    def __init__(self, generator):
        self.generator = generator
        self._epochs: Dict[int, int] = {}
        self._states: Dict[int, DayGenerationState] = {}

    # -------------------------
    # Per-day status
    # -------------------------
    def status(self, day: int) -> DayGenerationState:
        return self._states.get(day) or DayGenerationState(day=day, epoch=self._epochs.get(day, 0))

    def acknowledge(self, day: int) -> DayGenerationState:
        """Return a finished day to idle once its outcome has been shown"""
        current = self.status(day)
        if current.status in (GenerationStatus.SUCCEEDED, GenerationStatus.FAILED):
            self._states[day] = DayGenerationState(day=day, epoch=current.epoch)
        return self.status(day)

    def invalidate(self, days: Iterable[int]):
        """Drop status and orphan any in-flight request for days that no longer exist"""
        for day in days:
            self._epochs[day] = self._epochs.get(day, 0) + 1
            self._states.pop(day, None)
            logger.info(f"Invalidated generation for removed day {day}")

    def _begin(self, day: int) -> int:
        epoch = self._epochs.get(day, 0) + 1
        self._epochs[day] = epoch
        self._states[day] = DayGenerationState(day=day, status=GenerationStatus.GENERATING, epoch=epoch)
        return epoch

    def _is_current(self, state: PlannerState, day: int, epoch: int) -> bool:
        return self._epochs.get(day) == epoch and day in state.generated

    # -------------------------
    # Generation
    # -------------------------
    async def generate_day(self, holder, day: int) -> GenerationResult:
        """
        Generate and store the plan text for one day

        Args:
            holder: object exposing a read/write ``state`` attribute and the
                ``lock`` that guards it
            day: day number to generate

        Returns:
            GenerationResult describing this request's outcome
        """
        with holder.lock:
            request = build_day_request(holder.state, day)
            epoch = self._begin(day)
        logger.info(f"Requesting plan for day {day} (epoch {epoch}, {len(request.spots)} spots)")

        try:
            text = await self.generator.generate_day_plan(request)
        except GenerationError as e:
            return self._fail(holder, day, epoch, str(e))
        except Exception as e:
            logger.error(f"Unexpected error generating day {day}: {e}", exc_info=True)
            return self._fail(holder, day, epoch, f"Communication error: {e}")

        with holder.lock:
            if not self._is_current(holder.state, day, epoch):
                logger.info(f"Discarding stale plan for day {day} (epoch {epoch}, latest {self._epochs.get(day)})")
                return GenerationResult(day=day, epoch=epoch, status=GenerationStatus.SUCCEEDED, text=text)

            holder.state = apply_generated_text(holder.state, day, text)
            self._states[day] = DayGenerationState(day=day, status=GenerationStatus.SUCCEEDED, epoch=epoch)
        logger.info(f"Stored plan for day {day}, length: {len(text)}")
        return GenerationResult(day=day, epoch=epoch, status=GenerationStatus.SUCCEEDED, applied=True, text=text)

    def _fail(self, holder, day: int, epoch: int, message: str) -> GenerationResult:
        with holder.lock:
            applied = self._is_current(holder.state, day, epoch)
            if applied:
                self._states[day] = DayGenerationState(
                    day=day, status=GenerationStatus.FAILED, error=message, epoch=epoch
                )
        if applied:
            logger.error(f"Plan generation failed for day {day}: {message}")
        else:
            logger.info(f"Ignoring failure of superseded request for day {day} (epoch {epoch})")
        return GenerationResult(
            day=day, epoch=epoch, status=GenerationStatus.FAILED, applied=applied, error=message
        )
