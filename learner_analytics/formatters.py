"""
Display formatting helpers for the learner analytics dashboard.
All functions are pure; callers substitute 0 for missing numbers first.
"""

import math
from datetime import datetime
from typing import Any, Optional

# ─────────────────────────────────────────────
# TIERS & COLORS
# ─────────────────────────────────────────────

TIER_GOOD = "good"
TIER_WARNING = "warning"
TIER_BAD = "bad"

TONE_INFO = "info"
TONE_ACCENT = "accent"

TIER_COLORS = {
    TIER_GOOD: "#22C55E",
    TIER_WARNING: "#F59E0B",
    TIER_BAD: "#EF4444",
    TONE_INFO: "#4F8EF7",
    TONE_ACCENT: "#A855F7",
}

DEFAULT_THRESHOLD = 0.7

TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"

TREND_ICONS = {
    TREND_IMPROVING: "📈",
    TREND_DECLINING: "📉",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ─────────────────────────────────────────────
# VALUE FORMATTERS
# ─────────────────────────────────────────────

def format_percentage(value: float) -> str:
    """Ratio in [0, 1] to a whole-number percent string, e.g. 0.674 -> "67%"."""
    return f"{_round_half_up(value * 100)}%"


def format_progress(percentage: float) -> str:
    """Value already on the 0-100 scale."""
    return f"{_round_half_up(percentage)}%"


def format_number(value: Any) -> Any:
    """
    Comma-grouped rendering for numbers.
    Anything that is not an int/float (placeholder strings, None) passes through unchanged.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, int):
        return f"{value:,}"
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_time(seconds: float) -> str:
    if seconds < 60:
        return f"{_round_half_up(seconds)}s"
    if seconds < 3600:
        return f"{_round_half_up(seconds / 60)}m"
    return f"{_round_half_up(seconds / 3600)}h"


def format_delta(user: float, baseline: float) -> str:
    """Signed difference between two ratios, in percentage points."""
    points = _round_half_up(user * 100) - _round_half_up(baseline * 100)
    if points > 0:
        return f"+{points} pts"
    return f"{points} pts"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Local wall-clock time; naive values are taken as already local."""
    if value is None:
        return None
    return value.astimezone().strftime("%b %d, %Y %H:%M")


def humanize(key: str) -> str:
    """'flash_cards' -> 'Flash cards'"""
    text = key.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


# ─────────────────────────────────────────────
# CLASSIFICATION
# ─────────────────────────────────────────────

def get_performance_color(value: float, threshold: float = DEFAULT_THRESHOLD) -> str:
    """
    Three-tier classification of a ratio.
    good >= threshold, warning >= 0.7 * threshold, bad otherwise.
    """
    if value >= threshold:
        return TIER_GOOD
    if value >= threshold * 0.7:
        return TIER_WARNING
    return TIER_BAD


def delta_tier(user: float, baseline: float) -> str:
    points = _round_half_up(user * 100) - _round_half_up(baseline * 100)
    if points > 0:
        return TIER_GOOD
    if points < 0:
        return TIER_BAD
    return TIER_WARNING


def normalize_trend(trend: Optional[str]) -> str:
    return trend if trend else TREND_STABLE


def trend_tier(trend: Optional[str]) -> str:
    if trend == TREND_IMPROVING:
        return TIER_GOOD
    if trend == TREND_DECLINING:
        return TIER_BAD
    return TIER_WARNING


def trend_icon(trend: Optional[str]) -> str:
    return TREND_ICONS.get(trend, "➡️")
