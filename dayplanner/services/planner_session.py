import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from dayplanner.config import settings
from dayplanner.models.generation import DayGenerationState, GenerationResult
from dayplanner.models.itinerary import ItineraryDocument, PlannerState, Point, TransportMode
from dayplanner.services import day_store, ordering, reconciler
from dayplanner.services.generation import GenerationOrchestrator
from dayplanner.services.persistence import to_document
from dayplanner.services.plan_service import get_plan_text_service

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class PlannerSession:
    """
    Holds one user's planner state and applies their actions to it.

    Every read-modify-write of ``state`` happens under ``lock``, so concurrent
    actions from the same user are applied one after another.
    """

    def __init__(self, generator=None, days: Optional[int] = None):
        self.state: PlannerState = day_store.initial_state(days)
        self.lock = threading.Lock()
        self.orchestrator = GenerationOrchestrator(generator or get_plan_text_service())

    def _day(self, day: Optional[int]) -> int:
        return self.state.selectedDay if day is None else day

    def apply(self, reducer, *args) -> PlannerState:
        """Replace the state with ``reducer(state, *args)``"""
        with self.lock:
            self.state = reducer(self.state, *args)
            return self.state

    # -------------------------
    # Day count and selection
    # -------------------------
    def set_days(self, days: int) -> PlannerState:
        with self.lock:
            before = self.state
            self.state = reconciler.apply_reconcile(before, days)
            self.orchestrator.invalidate(reconciler.removed_days(before, self.state))
            return self.state

    def select_day(self, day: int) -> PlannerState:
        return self.apply(day_store.apply_select_day, day)

    def set_transport(self, transport: TransportMode) -> PlannerState:
        return self.apply(day_store.apply_set_transport, transport)

    def set_time_window(
        self,
        day: Optional[int] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> PlannerState:
        with self.lock:
            self.state = day_store.apply_set_time_window(self.state, self._day(day), start_time, end_time)
            return self.state

    # -------------------------
    # Spot ordering
    # -------------------------
    def _apply_to_day(self, reducer, day: Optional[int], *args) -> PlannerState:
        with self.lock:
            self.state = reducer(self.state, self._day(day), *args)
            return self.state

    def add_point(self, point: Point, day: Optional[int] = None) -> PlannerState:
        return self._apply_to_day(ordering.apply_add_to_day, day, point)

    def remove_point(self, point_id: str, day: Optional[int] = None) -> PlannerState:
        return self._apply_to_day(ordering.apply_remove_from_day, day, point_id)

    def move_up(self, index: int, day: Optional[int] = None) -> PlannerState:
        return self._apply_to_day(ordering.apply_move_up, day, index)

    def move_down(self, index: int, day: Optional[int] = None) -> PlannerState:
        return self._apply_to_day(ordering.apply_move_down, day, index)

    # -------------------------
    # Generation
    # -------------------------
    async def generate_day(self, day: Optional[int] = None) -> GenerationResult:
        return await self.orchestrator.generate_day(self, self._day(day))

    def generation_status(self, day: Optional[int] = None) -> DayGenerationState:
        return self.orchestrator.status(self._day(day))

    def acknowledge(self, day: Optional[int] = None) -> DayGenerationState:
        with self.lock:
            return self.orchestrator.acknowledge(self._day(day))

    # -------------------------
    # Persistence
    # -------------------------
    def to_document(self, title: str) -> ItineraryDocument:
        return to_document(title, self.state)


class PlannerRegistry:
    """
    In-memory planner sessions keyed by user id.

    Sessions unused for ``idle_seconds`` are dropped on the next lookup, and
    the least recently used one is dropped when ``max_sessions`` is reached.
    """

    def __init__(
        self,
        session_factory: Callable[[], PlannerSession] = PlannerSession,
        idle_seconds: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_factory = session_factory
        self.idle_seconds = settings.session_idle_seconds if idle_seconds is None else idle_seconds
        self.max_sessions = settings.max_sessions if max_sessions is None else max_sessions
        self.clock = clock
        self.lock = threading.Lock()
        # uid -> (session, last used), least recently used first
        self._sessions: "OrderedDict[str, tuple]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get_or_create(self, uid: str) -> PlannerSession:
        with self.lock:
            now = self.clock()
            self._evict_idle(now)

            entry = self._sessions.pop(uid, None)
            if entry is None:
                while len(self._sessions) >= self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info(f"Session limit {self.max_sessions} reached, dropped planner session for user {evicted}")
                session = self.session_factory()
                logger.info(f"Created planner session for user {uid}")
            else:
                session = entry[0]

            self._sessions[uid] = (session, now)
            return session

    def discard(self, uid: str):
        with self.lock:
            self._sessions.pop(uid, None)

    def _evict_idle(self, now: float):
        idle = [uid for uid, (_, last_used) in self._sessions.items() if now - last_used > self.idle_seconds]
        for uid in idle:
            del self._sessions[uid]
        if idle:
            logger.info(f"Dropped {len(idle)} idle planner sessions")


# Singleton instance
_registry_instance = None
_registry_lock = threading.Lock()

def get_planner_registry() -> PlannerRegistry:
    """Get singleton planner registry"""
    global _registry_instance
    with _registry_lock:
        if _registry_instance is None:
            _registry_instance = PlannerRegistry()
    return _registry_instance
