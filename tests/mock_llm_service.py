"""
Mock LLM service and plan generators for tests that must not reach Gemini.
"""

import asyncio
from typing import Any, Dict, List, Optional

from dayplanner.services.llm_service import LLMResponse


class MockLLMService:
    """Stands in for VertexAILLMService and returns a canned plan or a configured failure"""

    def __init__(
        self,
        content: str = "## Day plan\n- Time: 09:00-17:00\n- Route: Senso-ji -> Ueno Park",
        error: Optional[str] = None,
        error_type: Optional[str] = None,
        delay: float = 0,
    ):
        self.content = content
        self.error = error
        self.error_type = error_type
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def generate_content_async(self, user_message, system_instruction, config=None) -> LLMResponse:
        self.calls.append({
            "user_message": user_message,
            "system_instruction": system_instruction,
            "config": config,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            return LLMResponse(
                success=False,
                content="",
                raw_response=None,
                error=self.error,
                error_type=self.error_type,
            )
        return LLMResponse(success=True, content=self.content, raw_response=None)


class ScriptedPlanGenerator:
    """
    Day plan generator whose calls stay pending until the test releases them.

    Lets a test complete requests in any order it likes.
    """

    def __init__(self):
        self.requests = []
        self._events: List[asyncio.Event] = []
        self._outcomes: List[Any] = []

    async def generate_day_plan(self, request):
        index = len(self.requests)
        self.requests.append(request)
        self._events.append(asyncio.Event())
        self._outcomes.append(None)
        await self._events[index].wait()
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def wait_for_calls(self, count: int):
        while len(self.requests) < count:
            await asyncio.sleep(0)

    def release(self, index: int, outcome):
        self._outcomes[index] = outcome
        self._events[index].set()
