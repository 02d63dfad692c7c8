"""
Dashboard controller: drives loads from user actions and owns the view state.

Loads are synchronous calls on the client, but state changes are guarded by a
lock and tagged with a request generation, so loads may also complete from
worker threads. Only the response to the most recent analytics request is
applied; anything older is discarded.
"""

import logging
import threading
from typing import Optional, Tuple, Union

from learner_analytics.cache import ViewCache
from learner_analytics.client import AnalyticsAPIError, AnalyticsClient
from learner_analytics.config import DEFAULT_TIMEFRAME
from learner_analytics.formatters import format_timestamp
from learner_analytics.models import AnalyticsPayload, Timeframe
from learner_analytics.state import (
    DashboardViewState,
    LoadStatus,
    Tab,
    TabContent,
    TabStateMachine,
    build_content,
)
from learner_analytics.views import DERIVATIONS

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load analytics data"


class DashboardController:

    def __init__(self, client: AnalyticsClient, default_timeframe: str = DEFAULT_TIMEFRAME):
        self.client = client
        self.tabs = TabStateMachine()
        self.state = DashboardViewState(selected_timeframe_id=default_timeframe)
        self.views = ViewCache()
        self.mounted = False
        self._generation = 0
        self._lock = threading.Lock()

    # ── lifecycle ──────────────────────────────────────────────────────────

    def mount(self) -> None:
        """Initial load. Only the first call has any effect."""
        if self.mounted:
            return
        self.mounted = True
        self.load_timeframes()
        self.load_analytics()

    # ── loaders ────────────────────────────────────────────────────────────

    def load_timeframes(self) -> Tuple[Timeframe, ...]:
        try:
            timeframes = tuple(self.client.get_timeframes())
        except AnalyticsAPIError as e:
            logger.warning(f"Error loading timeframes: {e}")
            return self.state.timeframes
        with self._lock:
            self.state.timeframes = timeframes
        return timeframes

    def load_analytics(self) -> Optional[AnalyticsPayload]:
        with self._lock:
            self._generation += 1
            generation = self._generation
            timeframe_id = self.state.selected_timeframe_id
            self.state.status = LoadStatus.LOADING
            self.state.error_message = None

        logger.info(f"Loading analytics for timeframe={timeframe_id} (request {generation})")
        outcome = LoadStatus.ERROR
        try:
            payload = self.client.get_dashboard(timeframe_id, include_comparisons=True)
            outcome = LoadStatus.READY
            with self._lock:
                if generation != self._generation:
                    logger.debug(f"Discarding stale analytics response (request {generation})")
                    return None
                self.state.payload = payload
                self.state.error_message = None
            return payload
        except AnalyticsAPIError as e:
            logger.error(f"Error loading analytics: {e}")
            with self._lock:
                if generation != self._generation:
                    logger.debug(f"Discarding stale analytics failure (request {generation})")
                    return None
                self.state.error_message = LOAD_ERROR_MESSAGE
            return None
        finally:
            with self._lock:
                if generation == self._generation and self.state.status is LoadStatus.LOADING:
                    self.state.status = outcome

    # ── user actions ───────────────────────────────────────────────────────

    def select_timeframe(self, timeframe_id: str) -> bool:
        """Switch timeframe and reload analytics. Returns False when nothing changed."""
        with self._lock:
            if timeframe_id == self.state.selected_timeframe_id:
                return False
            self.state.selected_timeframe_id = timeframe_id
        self.load_analytics()
        return True

    def select_tab(self, tab: Union[Tab, str]) -> bool:
        changed = self.tabs.select(tab)
        self.state.active_tab = self.tabs.active
        return changed

    def refresh(self) -> Optional[AnalyticsPayload]:
        return self.load_analytics()

    # ── derived output ─────────────────────────────────────────────────────

    def derive(self, name: str):
        payload = self.state.payload
        return self.views.cached(name, payload, DERIVATIONS[name])

    def content(self) -> TabContent:
        return build_content(self.tabs.active, self.derive)

    def last_updated(self) -> Optional[str]:
        payload = self.state.payload
        if payload is None:
            return None
        return format_timestamp(payload.generated_at) or payload.generated_at_raw
