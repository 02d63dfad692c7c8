"""
Shared fixtures for the learner analytics tests.
"""
import copy
import threading
from typing import Dict, List, Optional

import pytest

from learner_analytics.client import AnalyticsAPIError
from learner_analytics.models import AnalyticsPayload, Timeframe

SAMPLE_PAYLOAD: Dict = {
    "generated_at": "2026-10-18T09:30:00Z",
    "user_analytics": {
        "performance_metrics": {
            "accuracy_rate": 0.674,
            "average_score": 0.5,
            "correct_answers": 1213,
            "total_questions": 1800,
            "performance_trend": "improving",
            "difficulty_breakdown": {
                "easy": {"accuracy": 0.9, "total": 600},
                "hard": {"accuracy": 0.3, "total": 400},
            },
            "recent_scores": [0.8, 0.02, 1.0],
        },
        "engagement_metrics": {
            "engagement_score": 0.75,
            "total_sessions": 42,
            "feature_usage": {"flash_cards": 12, "practice_tests": 3},
        },
        "time_metrics": {
            "current_study_streak": 6,
            "average_session_time": 125,
            "total_time_spent": 7260,
            "time_efficiency": 0.81,
            "peak_activity_times": ["09:00", "20:00"],
        },
        "progress_metrics": {
            "progress_percentage": 62.5,
            "completed_achievements": 4,
            "in_progress_achievements": 2,
            "learning_velocity": 0.33,
            "milestones": [
                {"name": "First Assessment", "achieved": True},
                {"name": "30-Day Streak", "achieved": False},
            ],
        },
        "skill_metrics": {
            "overall_mastery": 0.58,
            "strong_areas": ["algebra", "reading_comprehension", "algebra"],
            "weak_areas": ["geometry"],
        },
        "insights": ["You improved on hard questions."],
        "recommendations": ["Review geometry proofs."],
    },
    "comparison_data": {
        "performance_comparison": {
            "user_accuracy": 0.674,
            "user_engagement": 0.5,
            "platform_average_accuracy": 0.62,
            "platform_average_engagement": 0.5,
        }
    },
}


@pytest.fixture
def sample_raw() -> Dict:
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def sample_payload(sample_raw) -> AnalyticsPayload:
    return AnalyticsPayload.from_dict(sample_raw, timeframe_id="monthly")


class FakeClient:
    """In-memory stand-in for AnalyticsClient that records calls."""

    def __init__(self, payloads: Optional[Dict[str, Dict]] = None, timeframes: Optional[List[Timeframe]] = None):
        self.payloads = payloads if payloads is not None else {}
        self.timeframes = timeframes if timeframes is not None else [
            Timeframe("weekly", "This Week"),
            Timeframe("monthly", "This Month"),
        ]
        self.timeframe_calls = 0
        self.dashboard_calls: List[str] = []
        self.fail_dashboard = False
        self.fail_timeframes = False
        self.gates: Dict[str, threading.Event] = {}
        self.entered: Dict[str, threading.Event] = {}

    def get_timeframes(self) -> List[Timeframe]:
        self.timeframe_calls += 1
        if self.fail_timeframes:
            raise AnalyticsAPIError("timeframes unavailable", 503)
        return list(self.timeframes)

    def get_dashboard(self, timeframe_id: str, include_comparisons: bool = True) -> AnalyticsPayload:
        self.dashboard_calls.append(timeframe_id)
        assert include_comparisons is True
        if timeframe_id in self.entered:
            self.entered[timeframe_id].set()
        if timeframe_id in self.gates:
            self.gates[timeframe_id].wait(timeout=5)
        if self.fail_dashboard:
            raise AnalyticsAPIError("dashboard unavailable", 500)
        raw = self.payloads.get(timeframe_id, SAMPLE_PAYLOAD)
        return AnalyticsPayload.from_dict(copy.deepcopy(raw), timeframe_id=timeframe_id)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
