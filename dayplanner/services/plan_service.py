import asyncio
import logging
from typing import List, Optional

from dayplanner.config import settings
from dayplanner.exceptions import CommunicationError, GenerationError, PlanValidationError
from dayplanner.models.generation import DayPlanRequest, SpotPayload, TripPlanRequest
from dayplanner.models.itinerary import TransportMode
from dayplanner.services.llm_service import LLMConfig, SystemInstructions, get_llm_service
from dayplanner.services.validation import validate_spots, validate_time_window, validate_trip_days

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class PlanTextService:
    """Builds plan prompts and turns LLM outcomes into plan text or typed errors"""

    def __init__(self, llm_service=None, timeout: Optional[float] = None):
        self._llm_service = llm_service
        self.timeout = settings.generation_timeout_seconds if timeout is None else timeout

    @property
    def llm_service(self):
        # resolved lazily so missing credentials surface as a failed generation
        if self._llm_service is None:
            try:
                self._llm_service = get_llm_service()
            except RuntimeError as e:
                logger.error(f"Text generation is not configured: {e}")
                raise GenerationError("Text generation is not configured", detail=str(e))
        return self._llm_service

    async def generate_day_plan(self, request: DayPlanRequest) -> str:
        """
        Generate the plan text for a single day

        Args:
            request: ordered spots, transport mode and the day's time window

        Returns:
            Plan text as returned by the model (Markdown, not parsed here)
        """
        validate_spots(request.spots)
        validate_time_window(request.startTime, request.endTime)

        logger.info(f"Generating day plan for {len(request.spots)} spots, {request.startTime}-{request.endTime}")
        user_message = self._create_day_plan_prompt(request)
        return await self._generate(user_message, SystemInstructions.day_planner())

    async def generate_trip_plan(self, request: TripPlanRequest) -> str:
        """Generate a whole-trip plan from a destination or from a fixed spot list"""
        validate_trip_days(request.days)
        validate_time_window(request.startTime, request.endTime)

        if request.mode == "destination":
            if not request.destination or not request.destination.strip():
                raise PlanValidationError("Destination is required")
            logger.info(f"Generating {request.days}-day trip plan for {request.destination.strip()}")
        else:
            validate_spots(request.spots)
            logger.info(f"Generating {request.days}-day trip plan from {len(request.spots)} spots")

        user_message = self._create_trip_plan_prompt(request)
        return await self._generate(user_message, SystemInstructions.trip_planner())

    async def _generate(self, user_message: str, system_instruction: str) -> str:
        llm_service = self.llm_service
        config = LLMConfig()

        call = llm_service.generate_content_async(
            user_message=user_message,
            system_instruction=system_instruction,
            config=config
        )
        try:
            if self.timeout:
                response = await asyncio.wait_for(call, timeout=self.timeout)
            else:
                response = await call
        except asyncio.TimeoutError:
            logger.error(f"LLM call timed out after {self.timeout}s")
            raise CommunicationError("Communication error: text generation timed out",
                                     detail=f"no response within {self.timeout}s")

        if not response.success:
            if response.error_type == "transport":
                raise CommunicationError(f"Communication error: {response.error}", detail=response.error or "")
            raise GenerationError(f"Plan generation failed: {response.error}", detail=response.error or "")

        if not response.content.strip():
            logger.warning("LLM returned an empty plan")
            raise GenerationError("Plan generation failed: the model returned no text", detail="empty response")

        return response.content

    @staticmethod
    def _transport_label(transport: TransportMode) -> str:
        return "mostly on foot" if TransportMode(transport) == TransportMode.WALKING else "public transport or car"

    @staticmethod
    def _format_spots(spots: List[SpotPayload]) -> str:
        return "\n".join(f"  {i}. {s.name} ({s.lat}, {s.lng})" for i, s in enumerate(spots, start=1))

    def _create_day_plan_prompt(self, request: DayPlanRequest) -> str:
        """Create the prompt for one day's plan"""

        prompt_parts = [
            "Target: 1 day",
            f"Getting around: {self._transport_label(request.transport)}",
            f"Time window: {request.startTime}-{request.endTime}",
            "Spots to visit, in the order the traveller chose:",
            self._format_spots(request.spots),
            "",
            "Requirements:",
            "- Use only the spots listed.",
            "- Keep the listed order; the traveller arranged it.",
            f"- Start no earlier than {request.startTime} and finish by {request.endTime}.",
            "- Supplementary details may be skipped when no information is available.",
            "- Output format (Markdown):",
            "## Day plan",
            f"- Time: {request.startTime}-{request.endTime}",
            "- Route: A -> B -> C",
            "- Note: one line on getting around (walking / public transport)",
            "",
            "## Supplementary information (where available)",
            SystemInstructions.SUPPLEMENTARY_SECTIONS,
        ]

        return "\n".join(prompt_parts)

    def _create_trip_plan_prompt(self, request: TripPlanRequest) -> str:
        """Create the prompt for a multi-day plan"""

        prompt_parts = ["Assumptions:"]
        if request.mode == "destination":
            prompt_parts.append(f"- Destination: {request.destination.strip()}")
        prompt_parts.extend([
            f"- Total days: {request.days}",
            f"- Time window for each day: {request.startTime}-{request.endTime}",
            f"- Getting around: {self._transport_label(request.transport)}",
        ])

        if request.mode == "destination":
            prompt_parts.extend([
                "",
                "Requirements:",
                "- Choose spots and places to eat that are worth visiting in the destination, "
                "grouping nearby places so each day flows efficiently.",
                "- Format each day as shown below.",
            ])
        else:
            prompt_parts.extend([
                "- Available spots:",
                self._format_spots(request.spots),
                "",
                "Requirements:",
                "- Build the days from the listed spots only, grouping nearby spots together.",
            ])

        prompt_parts.extend([
            "",
            "Output format (Markdown), for example:",
            f"## Day 1 ({request.startTime}-{request.endTime})",
            "- Route: A -> B -> C",
            "- Note: one line on getting around (walking / public transport)",
            "",
            "### Supplementary information (where available)",
            SystemInstructions.SUPPLEMENTARY_SECTIONS,
        ])

        return "\n".join(prompt_parts)


def get_plan_text_service() -> PlanTextService:
    """Get instance of PlanTextService"""
    return PlanTextService()
