"""
Dashboard view state: tabs, load status and the per-tab content union.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from learner_analytics.config import DEFAULT_TIMEFRAME
from learner_analytics.models import AnalyticsPayload, Timeframe
from learner_analytics.views import EngagementView, InsightsView, PerformanceView, ProgressView


class Tab(str, Enum):
    OVERVIEW = "overview"
    PERFORMANCE = "performance"
    ENGAGEMENT = "engagement"
    PROGRESS = "progress"
    INSIGHTS = "insights"

    @classmethod
    def parse(cls, value: Union["Tab", str]) -> "Tab":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown dashboard tab: {value!r}") from None


TAB_ORDER: Tuple[Tab, ...] = tuple(Tab)


class TabStateMachine:
    """Active tab. Starts on overview; any tab may follow any other, on user selection only."""

    def __init__(self, initial: Tab = Tab.OVERVIEW):
        self.active = Tab.parse(initial)

    def select(self, tab: Union[Tab, str]) -> bool:
        target = Tab.parse(tab)
        changed = target is not self.active
        self.active = target
        return changed


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class DashboardViewState:
    selected_timeframe_id: str = DEFAULT_TIMEFRAME
    active_tab: Tab = Tab.OVERVIEW
    payload: Optional[AnalyticsPayload] = None
    status: LoadStatus = LoadStatus.LOADING
    error_message: Optional[str] = None
    timeframes: Tuple[Timeframe, ...] = field(default_factory=tuple)

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING


# ─────────────────────────────────────────────
# TAB CONTENT
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class OverviewContent:
    performance: Optional[PerformanceView]
    insights: Optional[InsightsView]


@dataclass(frozen=True)
class PerformanceContent:
    view: Optional[PerformanceView]


@dataclass(frozen=True)
class EngagementContent:
    view: Optional[EngagementView]


@dataclass(frozen=True)
class ProgressContent:
    view: Optional[ProgressView]


@dataclass(frozen=True)
class InsightsContent:
    view: Optional[InsightsView]


TabContent = Union[OverviewContent, PerformanceContent, EngagementContent, ProgressContent, InsightsContent]


def build_content(tab: Union[Tab, str], derive) -> TabContent:
    """
    Content for one tab. `derive(name)` returns the view-model for
    "performance", "engagement", "progress" or "insights".
    """
    tab = Tab.parse(tab)
    if tab is Tab.OVERVIEW:
        return OverviewContent(performance=derive("performance"), insights=derive("insights"))
    if tab is Tab.PERFORMANCE:
        return PerformanceContent(derive("performance"))
    if tab is Tab.ENGAGEMENT:
        return EngagementContent(derive("engagement"))
    if tab is Tab.PROGRESS:
        return ProgressContent(derive("progress"))
    return InsightsContent(derive("insights"))
