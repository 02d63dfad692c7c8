"""
Typed model of the analytics dashboard payload.

Every field is Optional: the backend may omit any sub-structure at any level,
and a malformed field is read as absent rather than failing the whole payload.
Defaulting for display happens later, in views.py.
"""

from __future__ import annotations

import math
import re
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# COERCION HELPERS
# ─────────────────────────────────────────────

def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    if number is None:
        return None
    return int(number)


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_dict(value: Any) -> Optional[Dict]:
    return value if isinstance(value, dict) else None


def _as_str_tuple(value: Any, unique: bool = False) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, list):
        return None
    items = [v for v in value if isinstance(v, str)]
    if unique:
        items = list(dict.fromkeys(items))
    return tuple(items)


def _as_float_tuple(value: Any) -> Optional[Tuple[float, ...]]:
    if not isinstance(value, list):
        return None
    return tuple(f for f in (_as_float(v) for v in value) if f is not None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    ts_str = _as_str(value)
    if not ts_str:
        return None
    try:
        ts_str = ts_str.replace("Z", "+00:00")
        ts_str = re.sub(r"\.(\d+)", lambda m: "." + m.group(1)[:6].ljust(6, "0"), ts_str)
        return datetime.fromisoformat(ts_str)
    except ValueError:
        logger.debug(f"Unparseable generated_at: {value!r}")
        return None


# ─────────────────────────────────────────────
# TIMEFRAMES
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Timeframe:
    id: str
    name: str

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["Timeframe"]:
        data = _as_dict(raw)
        if data is None:
            return None
        tf_id = data.get("id")
        if tf_id is None or tf_id == "":
            return None
        tf_id = str(tf_id)
        return cls(id=tf_id, name=_as_str(data.get("name")) or tf_id)


def parse_timeframes(raw: Any) -> List[Timeframe]:
    if not isinstance(raw, list):
        return []
    parsed = (Timeframe.from_dict(item) for item in raw)
    return [tf for tf in parsed if tf is not None]


# ─────────────────────────────────────────────
# USER ANALYTICS BLOCKS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class DifficultyStats:
    accuracy: Optional[float] = None
    total: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "DifficultyStats":
        data = _as_dict(raw) or {}
        return cls(accuracy=_as_float(data.get("accuracy")), total=_as_int(data.get("total")))


@dataclass(frozen=True)
class PerformanceMetrics:
    accuracy_rate: Optional[float] = None
    average_score: Optional[float] = None
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None
    performance_trend: Optional[str] = None
    difficulty_breakdown: Optional[Dict[str, DifficultyStats]] = None
    recent_scores: Optional[Tuple[float, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "PerformanceMetrics":
        breakdown = _as_dict(data.get("difficulty_breakdown"))
        return cls(
            accuracy_rate=_as_float(data.get("accuracy_rate")),
            average_score=_as_float(data.get("average_score")),
            correct_answers=_as_int(data.get("correct_answers")),
            total_questions=_as_int(data.get("total_questions")),
            performance_trend=_as_str(data.get("performance_trend")),
            difficulty_breakdown=(
                {str(k): DifficultyStats.from_dict(v) for k, v in breakdown.items()}
                if breakdown is not None else None
            ),
            recent_scores=_as_float_tuple(data.get("recent_scores")),
        )


@dataclass(frozen=True)
class EngagementMetrics:
    engagement_score: Optional[float] = None
    total_sessions: Optional[int] = None
    feature_usage: Optional[Dict[str, int]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "EngagementMetrics":
        usage = _as_dict(data.get("feature_usage"))
        return cls(
            engagement_score=_as_float(data.get("engagement_score")),
            total_sessions=_as_int(data.get("total_sessions")),
            feature_usage=(
                {str(k): _as_int(v) or 0 for k, v in usage.items()}
                if usage is not None else None
            ),
        )


@dataclass(frozen=True)
class TimeMetrics:
    current_study_streak: Optional[int] = None
    average_session_time: Optional[float] = None
    total_time_spent: Optional[float] = None
    time_efficiency: Optional[float] = None
    peak_activity_times: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "TimeMetrics":
        return cls(
            current_study_streak=_as_int(data.get("current_study_streak")),
            average_session_time=_as_float(data.get("average_session_time")),
            total_time_spent=_as_float(data.get("total_time_spent")),
            time_efficiency=_as_float(data.get("time_efficiency")),
            peak_activity_times=_as_str_tuple(data.get("peak_activity_times")),
        )


@dataclass(frozen=True)
class Milestone:
    name: str
    achieved: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["Milestone"]:
        data = _as_dict(raw)
        if data is None or _as_str(data.get("name")) is None:
            return None
        return cls(name=data["name"], achieved=data.get("achieved") is True)


@dataclass(frozen=True)
class ProgressMetrics:
    progress_percentage: Optional[float] = None
    completed_achievements: Optional[int] = None
    in_progress_achievements: Optional[int] = None
    learning_velocity: Optional[float] = None
    milestones: Optional[Tuple[Milestone, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "ProgressMetrics":
        raw_milestones = data.get("milestones")
        milestones = None
        if isinstance(raw_milestones, list):
            parsed = (Milestone.from_dict(m) for m in raw_milestones)
            milestones = tuple(m for m in parsed if m is not None)
        return cls(
            progress_percentage=_as_float(data.get("progress_percentage")),
            completed_achievements=_as_int(data.get("completed_achievements")),
            in_progress_achievements=_as_int(data.get("in_progress_achievements")),
            learning_velocity=_as_float(data.get("learning_velocity")),
            milestones=milestones,
        )


@dataclass(frozen=True)
class SkillMetrics:
    overall_mastery: Optional[float] = None
    strong_areas: Optional[Tuple[str, ...]] = None
    weak_areas: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "SkillMetrics":
        return cls(
            overall_mastery=_as_float(data.get("overall_mastery")),
            strong_areas=_as_str_tuple(data.get("strong_areas"), unique=True),
            weak_areas=_as_str_tuple(data.get("weak_areas"), unique=True),
        )


def _block(data: Dict, key: str, block_cls):
    raw = _as_dict(data.get(key))
    return block_cls.from_dict(raw) if raw is not None else None


@dataclass(frozen=True)
class UserAnalytics:
    performance_metrics: Optional[PerformanceMetrics] = None
    engagement_metrics: Optional[EngagementMetrics] = None
    time_metrics: Optional[TimeMetrics] = None
    progress_metrics: Optional[ProgressMetrics] = None
    skill_metrics: Optional[SkillMetrics] = None
    insights: Optional[Tuple[str, ...]] = None
    recommendations: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "UserAnalytics":
        return cls(
            performance_metrics=_block(data, "performance_metrics", PerformanceMetrics),
            engagement_metrics=_block(data, "engagement_metrics", EngagementMetrics),
            time_metrics=_block(data, "time_metrics", TimeMetrics),
            progress_metrics=_block(data, "progress_metrics", ProgressMetrics),
            skill_metrics=_block(data, "skill_metrics", SkillMetrics),
            insights=_as_str_tuple(data.get("insights")),
            recommendations=_as_str_tuple(data.get("recommendations")),
        )


# ─────────────────────────────────────────────
# COMPARISON & ENVELOPE
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class PerformanceComparison:
    user_accuracy: Optional[float] = None
    user_engagement: Optional[float] = None
    platform_average_accuracy: Optional[float] = None
    platform_average_engagement: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "PerformanceComparison":
        return cls(
            user_accuracy=_as_float(data.get("user_accuracy")),
            user_engagement=_as_float(data.get("user_engagement")),
            platform_average_accuracy=_as_float(data.get("platform_average_accuracy")),
            platform_average_engagement=_as_float(data.get("platform_average_engagement")),
        )


@dataclass(frozen=True)
class ComparisonData:
    performance_comparison: Optional[PerformanceComparison] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "ComparisonData":
        return cls(performance_comparison=_block(data, "performance_comparison", PerformanceComparison))


@dataclass(frozen=True)
class AnalyticsPayload:
    generated_at: Optional[datetime] = None
    generated_at_raw: Optional[str] = None
    user_analytics: Optional[UserAnalytics] = None
    comparison_data: Optional[ComparisonData] = None
    timeframe_id: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, raw: Any, timeframe_id: Optional[str] = None) -> "AnalyticsPayload":
        data = _as_dict(raw) or {}
        generated = data.get("generated_at")
        return cls(
            generated_at=parse_timestamp(generated),
            generated_at_raw=generated if isinstance(generated, str) else None,
            user_analytics=_block(data, "user_analytics", UserAnalytics),
            comparison_data=_block(data, "comparison_data", ComparisonData),
            timeframe_id=timeframe_id,
        )
