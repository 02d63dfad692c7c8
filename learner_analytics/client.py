"""
Learner Analytics REST API Client
─────────────────────────────────────────────────────────────────────────────
Two read-only endpoints:

  GET /api/analytics/timeframes
      Response: { "timeframes": [ { "id", "name" }, ... ] }

  GET /api/analytics/dashboard?timeframe=<id>&include_comparisons=true
      Response: { "data": { "generated_at", "user_analytics", "comparison_data" } }

Auth: Bearer token, read from a token provider on every request.
Every failure surfaces as AnalyticsAPIError.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from learner_analytics.config import DEFAULT_BACKEND_URL, DEFAULT_TIMEOUT
from learner_analytics.credentials import StaticTokenProvider, TokenProvider
from learner_analytics.models import AnalyticsPayload, Timeframe, parse_timeframes

logger = logging.getLogger(__name__)

TIMEFRAMES_PATH = "/api/analytics/timeframes"
DASHBOARD_PATH = "/api/analytics/dashboard"


class AnalyticsAPIError(Exception):
    """Raised for any failed request or unusable response from the analytics backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AnalyticsClient:

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        token_provider: Optional[TokenProvider] = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or StaticTokenProvider(None)
        self.timeout = timeout

        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=1.0,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        self.session.headers.update({"Accept": "application/json"})

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict:
        url = self.base_url + path
        try:
            resp = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
            logger.info(f"GET {resp.url} -> {resp.status_code}")
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise AnalyticsAPIError(f"Analytics backend returned HTTP {status} for {path}", status) from e
        except requests.exceptions.RequestException as e:
            raise AnalyticsAPIError(f"Request to {path} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise AnalyticsAPIError(f"Response from {path} is not valid JSON", resp.status_code) from e
        if not isinstance(body, dict):
            raise AnalyticsAPIError(f"Unexpected response shape from {path}", resp.status_code)
        return body

    def get_timeframes(self) -> List[Timeframe]:
        body = self._get_json(TIMEFRAMES_PATH)
        raw = body.get("timeframes")
        if not isinstance(raw, list):
            raise AnalyticsAPIError("Timeframe response is missing the 'timeframes' list")
        timeframes = parse_timeframes(raw)
        logger.info(f"Loaded {len(timeframes)} timeframes")
        return timeframes

    def get_dashboard(self, timeframe_id: str, include_comparisons: bool = True) -> AnalyticsPayload:
        params = {
            "timeframe": timeframe_id,
            "include_comparisons": "true" if include_comparisons else "false",
        }
        body = self._get_json(DASHBOARD_PATH, params=params)
        data = body.get("data")
        if not isinstance(data, dict):
            raise AnalyticsAPIError("Dashboard response is missing the 'data' object")
        return AnalyticsPayload.from_dict(data, timeframe_id=timeframe_id)

    def close(self) -> None:
        self.session.close()


class MockAnalyticsClient(AnalyticsClient):
    """
    Offline demo client. Payloads are pseudo-random but seeded by the
    timeframe id, so the same timeframe always yields the same payload.
    """

    TIMEFRAMES = [
        ("daily", "Today"),
        ("weekly", "This Week"),
        ("monthly", "This Month"),
        ("quarterly", "This Quarter"),
        ("yearly", "This Year"),
        ("all_time", "All Time"),
    ]

    def __init__(self, fail_timeframes: Iterable[str] = ()):
        self.base_url = "mock://local"
        self.token_provider = StaticTokenProvider(None)
        self.timeout = 0
        self.session = None
        self.fail_timeframes = set(fail_timeframes)

    def get_timeframes(self) -> List[Timeframe]:
        return [Timeframe(id=tf_id, name=name) for tf_id, name in self.TIMEFRAMES]

    def get_dashboard(self, timeframe_id: str, include_comparisons: bool = True) -> AnalyticsPayload:
        if timeframe_id in self.fail_timeframes:
            raise AnalyticsAPIError(f"Mock failure for timeframe {timeframe_id!r}", 503)
        return AnalyticsPayload.from_dict(
            self.build_payload(timeframe_id, include_comparisons),
            timeframe_id=timeframe_id,
        )

    def build_payload(self, timeframe_id: str, include_comparisons: bool = True) -> Dict:
        rng = random.Random(timeframe_id)

        DIFFICULTIES = ["easy", "medium", "hard"]
        FEATURES = ["flash_cards", "practice_tests", "study_groups", "ai_tutor", "notes"]
        SUBJECTS = ["algebra", "geometry", "reading_comprehension", "vocabulary",
                    "statistics", "grammar", "chemistry"]
        MILESTONES = ["First Assessment", "7-Day Streak", "100 Questions",
                      "Perfect Score", "30-Day Streak", "1000 Questions"]
        PEAK_TIMES = ["07:00", "09:00", "13:00", "18:00", "20:00", "22:00"]

        total_questions = rng.randint(40, 900)
        accuracy = round(max(0.0, min(1.0, rng.gauss(0.72, 0.15))), 3)
        engagement = round(rng.uniform(0.35, 0.95), 3)
        subjects = rng.sample(SUBJECTS, k=6)

        payload: Dict[str, Any] = {
            "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            "user_analytics": {
                "performance_metrics": {
                    "accuracy_rate": accuracy,
                    "average_score": round(max(0.0, min(1.0, accuracy + rng.uniform(-0.1, 0.1))), 3),
                    "correct_answers": int(total_questions * accuracy),
                    "total_questions": total_questions,
                    "performance_trend": rng.choice(["improving", "declining", "stable"]),
                    "difficulty_breakdown": {
                        d: {"accuracy": round(rng.uniform(0.3, 0.95), 3), "total": rng.randint(5, 300)}
                        for d in DIFFICULTIES
                    },
                    "recent_scores": [round(rng.uniform(0.2, 1.0), 2) for _ in range(rng.randint(5, 12))],
                },
                "engagement_metrics": {
                    "engagement_score": engagement,
                    "total_sessions": rng.randint(3, 120),
                    "feature_usage": {f: rng.randint(0, 80) for f in FEATURES},
                },
                "time_metrics": {
                    "current_study_streak": rng.randint(0, 45),
                    "average_session_time": rng.randint(120, 5400),
                    "total_time_spent": rng.randint(3600, 360000),
                    "time_efficiency": round(rng.uniform(0.4, 0.95), 3),
                    "peak_activity_times": sorted(rng.sample(PEAK_TIMES, k=2)),
                },
                "progress_metrics": {
                    "progress_percentage": round(rng.uniform(5, 98), 1),
                    "completed_achievements": rng.randint(0, 25),
                    "in_progress_achievements": rng.randint(0, 8),
                    "learning_velocity": round(rng.uniform(0.1, 0.9), 3),
                    "milestones": [{"name": m, "achieved": rng.random() > 0.4} for m in MILESTONES],
                },
                "skill_metrics": {
                    "overall_mastery": round(rng.uniform(0.3, 0.9), 3),
                    "strong_areas": subjects[:3],
                    "weak_areas": subjects[3:],
                },
                "insights": [
                    f"Your accuracy on hard questions is {rng.randint(5, 20)}% higher than last period.",
                    "You study most consistently in the evening.",
                ],
                "recommendations": [
                    f"Spend 15 more minutes per week on {subjects[3].replace('_', ' ')}.",
                    "Try a timed practice test to build exam stamina.",
                ],
            },
        }
        if include_comparisons:
            payload["comparison_data"] = {
                "performance_comparison": {
                    "user_accuracy": accuracy,
                    "user_engagement": engagement,
                    "platform_average_accuracy": round(rng.uniform(0.55, 0.75), 3),
                    "platform_average_engagement": round(rng.uniform(0.45, 0.7), 3),
                }
            }
        return payload

    def close(self) -> None:
        pass
