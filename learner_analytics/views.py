"""
View-model derivation for the four dashboard sections.

Each derive_* function takes the latest AnalyticsPayload and returns a fully
defaulted view, or None when there is no user_analytics to show. Missing
numbers become 0, missing sequences/mappings become empty, a missing trend
reads as "stable". Sections with nothing to show are left empty (or None)
so the renderer can skip them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from learner_analytics.formatters import (
    TONE_ACCENT,
    TONE_INFO,
    TIER_GOOD,
    TIER_WARNING,
    delta_tier,
    format_delta,
    format_number,
    format_percentage,
    format_progress,
    format_time,
    get_performance_color,
    humanize,
    normalize_trend,
    trend_icon,
    trend_tier,
)
from learner_analytics.models import (
    AnalyticsPayload,
    EngagementMetrics,
    PerformanceComparison,
    PerformanceMetrics,
    ProgressMetrics,
    SkillMetrics,
    UserAnalytics,
)

MIN_SCORE_BAR_HEIGHT = 5.0


def _num(value):
    return value if value is not None else 0


@dataclass(frozen=True)
class MetricCard:
    label: str
    value: str
    tone: str
    caption: str = ""


# ─────────────────────────────────────────────
# PERFORMANCE
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class DifficultyRow:
    difficulty: str
    accuracy: str
    tone: str
    total: int


@dataclass(frozen=True)
class ScoreBar:
    height_pct: float
    label: str


@dataclass(frozen=True)
class PerformanceView:
    cards: Tuple[MetricCard, ...]
    trend: str
    difficulty: Tuple[DifficultyRow, ...]
    recent_scores: Tuple[ScoreBar, ...]

    @property
    def recent_caption(self) -> str:
        return f"Last {len(self.recent_scores)} assessment scores"


def derive_performance(payload: Optional[AnalyticsPayload]) -> Optional[PerformanceView]:
    ua = _user_analytics(payload)
    if ua is None:
        return None
    perf = ua.performance_metrics or PerformanceMetrics()

    accuracy = _num(perf.accuracy_rate)
    average = _num(perf.average_score)
    total_questions = _num(perf.total_questions)
    trend = normalize_trend(perf.performance_trend)

    cards = (
        MetricCard(
            "Accuracy Rate", format_percentage(accuracy), get_performance_color(accuracy),
            f"{_num(perf.correct_answers)} / {total_questions} correct",
        ),
        MetricCard(
            "Average Score", format_percentage(average), get_performance_color(average),
            f"Trend: {trend}",
        ),
        MetricCard(
            "Questions Answered", format_number(total_questions), TONE_INFO,
            "Total assessments completed",
        ),
        MetricCard("Performance Trend", trend_icon(trend), trend_tier(trend), trend.capitalize()),
    )

    difficulty = tuple(
        DifficultyRow(
            difficulty=humanize(name),
            accuracy=format_percentage(_num(stats.accuracy)),
            tone=get_performance_color(_num(stats.accuracy)),
            total=_num(stats.total),
        )
        for name, stats in (perf.difficulty_breakdown or {}).items()
    )

    recent = tuple(
        ScoreBar(
            height_pct=max(score * 100, MIN_SCORE_BAR_HEIGHT),
            label=f"Assessment {i}: {format_percentage(score)}",
        )
        for i, score in enumerate(perf.recent_scores or (), start=1)
    )

    return PerformanceView(cards=cards, trend=trend, difficulty=difficulty, recent_scores=recent)


# ─────────────────────────────────────────────
# ENGAGEMENT
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class FeatureUsageRow:
    feature: str
    count: int


@dataclass(frozen=True)
class TimeAnalysis:
    total_time: str
    efficiency: str
    peak_hours: str


@dataclass(frozen=True)
class EngagementView:
    cards: Tuple[MetricCard, ...]
    feature_usage: Tuple[FeatureUsageRow, ...]
    time_analysis: Optional[TimeAnalysis]


def derive_engagement(payload: Optional[AnalyticsPayload]) -> Optional[EngagementView]:
    ua = _user_analytics(payload)
    if ua is None:
        return None
    engagement = ua.engagement_metrics or EngagementMetrics()
    time_metrics = ua.time_metrics

    score = _num(engagement.engagement_score)
    avg_session = format_time(_num(time_metrics.average_session_time)) if time_metrics else "0m"
    streak = _num(time_metrics.current_study_streak) if time_metrics else 0

    cards = (
        MetricCard("Engagement Score", format_percentage(score), get_performance_color(score),
                   "Overall platform engagement"),
        MetricCard("Total Sessions", format_number(_num(engagement.total_sessions)), TONE_INFO,
                   "Assessment sessions completed"),
        MetricCard("Study Streak", format_number(streak), TIER_GOOD, "Consecutive days"),
        MetricCard("Avg Session Time", avg_session, TONE_ACCENT, "Per session average"),
    )

    usage = tuple(
        FeatureUsageRow(feature=humanize(name), count=count)
        for name, count in (engagement.feature_usage or {}).items()
    )

    analysis = None
    if time_metrics is not None:
        analysis = TimeAnalysis(
            total_time=format_time(_num(time_metrics.total_time_spent)),
            efficiency=format_percentage(_num(time_metrics.time_efficiency)),
            peak_hours=", ".join(time_metrics.peak_activity_times or ()) or "N/A",
        )

    return EngagementView(cards=cards, feature_usage=usage, time_analysis=analysis)


# ─────────────────────────────────────────────
# PROGRESS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class MilestoneBadge:
    name: str
    achieved: bool

    @property
    def icon(self) -> str:
        return "🏆" if self.achieved else "🔒"


@dataclass(frozen=True)
class ProgressView:
    cards: Tuple[MetricCard, ...]
    progress_bar_pct: float
    strong_areas: Tuple[str, ...]
    weak_areas: Tuple[str, ...]
    milestones: Tuple[MilestoneBadge, ...]


def derive_progress(payload: Optional[AnalyticsPayload]) -> Optional[ProgressView]:
    ua = _user_analytics(payload)
    if ua is None:
        return None
    progress = ua.progress_metrics or ProgressMetrics()
    skills = ua.skill_metrics or SkillMetrics()

    pct = _num(progress.progress_percentage)

    cards = (
        MetricCard("Overall Progress", format_progress(pct), TONE_INFO),
        MetricCard("Achievements", format_number(_num(progress.completed_achievements)), TIER_GOOD,
                   f"{_num(progress.in_progress_achievements)} in progress"),
        MetricCard("Learning Velocity", format_percentage(_num(progress.learning_velocity)), TONE_ACCENT,
                   "Progress rate"),
        MetricCard("Skill Mastery", format_percentage(_num(skills.overall_mastery)), TIER_WARNING,
                   "Average across subjects"),
    )

    return ProgressView(
        cards=cards,
        progress_bar_pct=min(max(pct, 0.0), 100.0),
        strong_areas=tuple(humanize(a) for a in skills.strong_areas or ()),
        weak_areas=tuple(humanize(a) for a in skills.weak_areas or ()),
        milestones=tuple(MilestoneBadge(m.name, m.achieved) for m in progress.milestones or ()),
    )


# ─────────────────────────────────────────────
# INSIGHTS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class ComparisonView:
    user_accuracy: str
    user_engagement: str
    platform_accuracy: str
    platform_engagement: str
    accuracy_delta: str
    accuracy_delta_tone: str
    engagement_delta: str
    engagement_delta_tone: str


@dataclass(frozen=True)
class InsightsView:
    insights: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    comparison: Optional[ComparisonView]


def derive_comparison(payload: Optional[AnalyticsPayload]) -> Optional[ComparisonView]:
    if payload is None or payload.comparison_data is None:
        return None
    pc = payload.comparison_data.performance_comparison or PerformanceComparison()
    user_acc = _num(pc.user_accuracy)
    user_eng = _num(pc.user_engagement)
    plat_acc = _num(pc.platform_average_accuracy)
    plat_eng = _num(pc.platform_average_engagement)
    return ComparisonView(
        user_accuracy=format_percentage(user_acc),
        user_engagement=format_percentage(user_eng),
        platform_accuracy=format_percentage(plat_acc),
        platform_engagement=format_percentage(plat_eng),
        accuracy_delta=format_delta(user_acc, plat_acc),
        accuracy_delta_tone=delta_tier(user_acc, plat_acc),
        engagement_delta=format_delta(user_eng, plat_eng),
        engagement_delta_tone=delta_tier(user_eng, plat_eng),
    )


def derive_insights(payload: Optional[AnalyticsPayload]) -> Optional[InsightsView]:
    ua = _user_analytics(payload)
    if ua is None:
        return None
    return InsightsView(
        insights=ua.insights or (),
        recommendations=ua.recommendations or (),
        comparison=derive_comparison(payload),
    )


def _user_analytics(payload: Optional[AnalyticsPayload]) -> Optional[UserAnalytics]:
    if payload is None:
        return None
    return payload.user_analytics


DERIVATIONS = {
    "performance": derive_performance,
    "engagement": derive_engagement,
    "progress": derive_progress,
    "insights": derive_insights,
}
