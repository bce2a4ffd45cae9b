import logging
from typing import Any, List, Optional
from dataclasses import dataclass

import httpx
from google import genai
from google.genai import errors, types

from dayplanner.config import settings

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@dataclass
class LLMConfig:
    """Configuration for LLM calls"""
    model: str = settings.llm_model
    temperature: float = settings.llm_temperature
    top_p: float = settings.llm_top_p
    max_output_tokens: int = settings.max_output_tokens


@dataclass
class LLMResponse:
    """Standardized LLM response"""
    success: bool
    content: str
    raw_response: Any
    error: Optional[str] = None
    error_type: Optional[str] = None  # "api" | "transport"


class VertexAILLMService:
    """Gemini client used for plan text, on Vertex AI or with a Gemini API key"""

    def __init__(self):
        self.project_id = settings.google_cloud_project
        self.location = settings.vertex_ai_location
        self.api_key = settings.gemini_api_key

        if not self.project_id and not self.api_key:
            raise RuntimeError("GOOGLE_CLOUD_PROJECT or GEMINI_API_KEY environment variable is required")

        try:
            if self.project_id:
                self.client = genai.Client(
                    vertexai=True,
                    project=self.project_id,
                    location=self.location
                )
                logger.info(f"Initialized Vertex AI client for project: {self.project_id}")
            else:
                self.client = genai.Client(api_key=self.api_key)
                logger.info("Initialized Gemini API client")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {e}")
            raise RuntimeError(f"Gemini client initialization failed: {e}")

    def _create_contents(self, system_instruction: str, user_message: str) -> List[types.Content]:
        """Create content structure for the LLM"""
        combined_message = f"{system_instruction}\n\n{user_message}"

        return [
            types.Content(
                role="user",
                parts=[
                    types.Part(text=combined_message)
                ]
            )
        ]

    async def generate_content_async(
        self,
        user_message: str,
        system_instruction: str,
        config: Optional[LLMConfig] = None
    ) -> LLMResponse:
        """
        Generate content without blocking the event loop

        Args:
            user_message: The user's input message
            system_instruction: Custom system instruction for this call
            config: LLM configuration (optional, uses defaults if not provided)

        Returns:
            LLMResponse object; failures are reported through success/error
            rather than raised
        """
        if config is None:
            config = LLMConfig()

        try:
            logger.info(f"Making LLM call with model: {config.model}")

            contents = self._create_contents(system_instruction, user_message)

            generate_content_config = types.GenerateContentConfig(
                temperature=config.temperature,
                top_p=config.top_p,
                max_output_tokens=config.max_output_tokens,
            )

            response = await self.client.aio.models.generate_content(
                model=config.model,
                contents=contents,
                config=generate_content_config
            )

            content = response.text or ""
            logger.info(f"LLM call successful, response length: {len(content)}")

            return LLMResponse(
                success=True,
                content=content,
                raw_response=response,
            )

        except errors.APIError as e:
            logger.error(f"LLM call failed with status {e.code}: {e.message}")
            return LLMResponse(
                success=False,
                content="",
                raw_response=None,
                error=f"({e.code}) {e.message}",
                error_type="api",
            )
        except httpx.TransportError as e:
            logger.error(f"LLM call could not reach the service: {e}")
            return LLMResponse(
                success=False,
                content="",
                raw_response=None,
                error=str(e) or e.__class__.__name__,
                error_type="transport",
            )


# Singleton instance
_llm_service_instance = None

def get_llm_service() -> VertexAILLMService:
    """Get singleton instance of LLM service"""
    global _llm_service_instance
    if _llm_service_instance is None:
        _llm_service_instance = VertexAILLMService()
    return _llm_service_instance


# Predefined System Instructions
class SystemInstructions:
    """Collection of predefined system instructions"""

    SUPPLEMENTARY_SECTIONS = (
        "- 1. Food and cafes (popular local dishes, places to rest, lunch/dinner options that fit the time of day)\n"
        "- 2. Stay times and model route (average time at each spot, morning/afternoon schedule)\n"
        "- 3. Sightseeing and experiences (highlights, activities)\n"
        "- 4. Practical information (transport options, crowd levels, cost estimates)\n"
        "- 5. Seasonal and weather advice (seasonal recommendations, rainy-day alternatives)"
    )

    @staticmethod
    def day_planner(language: str = settings.plan_language) -> str:
        return (
            "You are a travel planner. Using only the spots provided, write a feasible plan for one day "
            f"in {language}.\n"
            "If information for an item is missing, skip it instead of guessing "
            "(do not fill in 'unknown' or leave empty placeholders).\n"
            "Answer in readable Markdown and do not be verbose."
        )

    @staticmethod
    def trip_planner(language: str = settings.plan_language) -> str:
        return (
            f"You are a travel planner. Answer in {language} Markdown and keep the structure concise.\n"
            "Each day must start and end strictly within the time window the user gives.\n"
            "Include a one-line note on getting around (walking / public transport) and, where you can, add: "
            "food and cafes, stay times and model route, highlights and experiences, "
            "practical information (transport, crowds, costs), seasonal and weather advice."
        )
