"""
Reusable Streamlit UI components for the learner analytics dashboard.
One render function per tab content variant; see RENDERERS.
"""

import html

import streamlit as st
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List, Optional, Sequence

from learner_analytics.formatters import TIER_COLORS, TONE_INFO
from learner_analytics.state import (
    EngagementContent,
    InsightsContent,
    OverviewContent,
    PerformanceContent,
    ProgressContent,
    TabContent,
)
from learner_analytics.views import (
    EngagementView,
    InsightsView,
    MetricCard,
    PerformanceView,
    ProgressView,
)


def tone_color(tone: str) -> str:
    return TIER_COLORS.get(tone, TIER_COLORS[TONE_INFO])


def inject_css():
    """Inject global CSS overrides for dark professional styling."""
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@300;400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap');

        html, body, [class*="css"] {
            font-family: 'Space Grotesk', sans-serif;
        }

        .stApp { background: #0A0C14; }

        section[data-testid="stSidebar"] {
            background: #0F1117;
            border-right: 1px solid #1E2235;
        }

        .la-card {
            background: linear-gradient(135deg, #12172A 0%, #1A1D30 100%);
            border: 1px solid #1E2640;
            border-radius: 12px;
            padding: 18px;
            margin-bottom: 12px;
            border-top-width: 3px;
        }

        .card-label {
            font-size: 11px;
            font-weight: 600;
            letter-spacing: 0.08em;
            text-transform: uppercase;
            color: #6B7494;
            margin-bottom: 6px;
        }

        .card-value {
            font-size: 30px;
            font-weight: 700;
            line-height: 1;
            font-family: 'JetBrains Mono', monospace;
        }

        .card-desc {
            font-size: 11px;
            color: #4A5068;
            margin-top: 6px;
        }

        .section-header {
            margin: 24px 0 12px 0;
            padding-bottom: 8px;
            border-bottom: 1px solid #1E2235;
        }

        .section-title {
            font-size: 15px;
            font-weight: 700;
            letter-spacing: 0.06em;
            text-transform: uppercase;
        }

        .la-note {
            border-radius: 8px;
            padding: 12px 14px;
            margin-bottom: 8px;
            font-size: 14px;
        }

        hr { border-color: #1E2235 !important; }
    </style>
    """, unsafe_allow_html=True)


# ─────────────────────────────────────────────
# BUILDING BLOCKS
# ─────────────────────────────────────────────

def metric_card(card: MetricCard):
    color = tone_color(card.tone)
    st.markdown(f"""
    <div class="la-card" style="border-top-color: {color};">
        <div class="card-label">{html.escape(card.label)}</div>
        <div class="card-value" style="color: {color};">{html.escape(card.value)}</div>
        <div class="card-desc">{html.escape(card.caption)}</div>
    </div>
    """, unsafe_allow_html=True)


def card_row(cards: Sequence[MetricCard], cols: int = 4):
    for row_start in range(0, len(cards), cols):
        row = cards[row_start:row_start + cols]
        for col, card in zip(st.columns(cols), row):
            with col:
                metric_card(card)


def section_header(title: str, icon: str = "", color: str = "#C0C8E8"):
    icon_html = f'<span style="margin-right: 8px;">{icon}</span>' if icon else ""
    st.markdown(f"""
    <div class="section-header">
        {icon_html}<span class="section-title" style="color: {color};">{title}</span>
    </div>
    """, unsafe_allow_html=True)


def note(text: str, tone: str = TONE_INFO):
    color = tone_color(tone)
    st.markdown(
        f'<div class="la-note" style="border: 1px solid {color}; background: {color}1A; color: #E8EAF6;">'
        f'{html.escape(text)}</div>',
        unsafe_allow_html=True,
    )


PLOTLY_LAYOUT = dict(
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(family="Space Grotesk, sans-serif", color="#8B92B0", size=11),
    margin=dict(l=10, r=10, t=30, b=30),
    xaxis=dict(showgrid=False, tickfont=dict(color="#6B7494", size=10), zeroline=False),
    yaxis=dict(showgrid=True, gridcolor="#1E2235", tickfont=dict(color="#6B7494", size=10), zeroline=False),
    legend=dict(bgcolor="rgba(0,0,0,0)", font=dict(color="#8B92B0")),
)


def bar_chart(labels: List, values: List, colors: Optional[List[str]] = None, hover: Optional[List[str]] = None,
              title: str = "", height: int = 220, y_range: Optional[List[float]] = None):
    if not labels or not values:
        st.caption("No data")
        return
    fig = go.Figure(go.Bar(
        x=labels, y=values,
        marker_color=colors or tone_color(TONE_INFO),
        marker_line_width=0,
        hovertext=hover,
        hoverinfo="text" if hover else None,
    ))
    layout = {**PLOTLY_LAYOUT, "height": height, "title": dict(text=title, font=dict(size=12, color="#C0C8E8"))}
    if y_range:
        layout["yaxis"] = {**PLOTLY_LAYOUT["yaxis"], "range": y_range}
    fig.update_layout(**layout)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


# ─────────────────────────────────────────────
# SECTION RENDERERS
# ─────────────────────────────────────────────

def render_performance(view: Optional[PerformanceView], catalog: Dict):
    if view is None:
        st.info(catalog["messages"]["no_data"])
        return
    card_row(view.cards)

    if view.difficulty:
        section_header("Performance by Difficulty")
        for col, row in zip(st.columns(len(view.difficulty)), view.difficulty):
            with col:
                metric_card(MetricCard(row.difficulty, row.accuracy, row.tone, f"{row.total} questions"))

    if view.recent_scores:
        section_header("Recent Performance Trend")
        bar_chart(
            labels=[str(i) for i in range(1, len(view.recent_scores) + 1)],
            values=[bar.height_pct for bar in view.recent_scores],
            hover=[bar.label for bar in view.recent_scores],
            height=200,
            y_range=[0, 100],
        )
        st.caption(view.recent_caption)


def render_engagement(view: Optional[EngagementView], catalog: Dict):
    if view is None:
        st.info(catalog["messages"]["no_data"])
        return
    card_row(view.cards)

    if view.feature_usage:
        section_header("Feature Usage")
        df = pd.DataFrame(
            [{"Feature": row.feature, "Uses": row.count} for row in view.feature_usage]
        )
        st.dataframe(df, use_container_width=True, hide_index=True)

    if view.time_analysis is not None:
        section_header("Time Analysis")
        ta = view.time_analysis
        card_row([
            MetricCard("Total Time Spent", ta.total_time, "info"),
            MetricCard("Time Efficiency", ta.efficiency, "good"),
            MetricCard("Peak Hours", ta.peak_hours, "accent"),
        ], cols=3)


def render_progress(view: Optional[ProgressView], catalog: Dict):
    if view is None:
        st.info(catalog["messages"]["no_data"])
        return
    card_row(view.cards)
    st.progress(int(view.progress_bar_pct))

    if view.strong_areas or view.weak_areas:
        col_strong, col_weak = st.columns(2)
        if view.strong_areas:
            with col_strong:
                section_header("Strong Areas")
                for area in view.strong_areas:
                    st.markdown(f"✓ {area}")
        if view.weak_areas:
            with col_weak:
                section_header("Areas for Improvement")
                for area in view.weak_areas:
                    st.markdown(f"⚠ {area}")

    if view.milestones:
        section_header("Milestones Achieved")
        cols = st.columns(3)
        for i, milestone in enumerate(view.milestones):
            with cols[i % 3]:
                note(f"{milestone.icon} {milestone.name}", "good" if milestone.achieved else "info")


def render_insights(view: Optional[InsightsView], catalog: Dict):
    if view is None:
        st.info(catalog["messages"]["no_data"])
        return
    messages = catalog["messages"]

    section_header("AI-Powered Insights", icon="🧠")
    if view.insights:
        for insight in view.insights:
            note(insight, "info")
    else:
        st.caption(messages["no_insights"])

    section_header("Personalized Recommendations", icon="💡")
    if view.recommendations:
        for recommendation in view.recommendations:
            note(recommendation, "good")
    else:
        st.caption(messages["no_recommendations"])

    comparison = view.comparison
    if comparison is not None:
        section_header("Platform Comparison", icon="📊")
        col_acc, col_eng = st.columns(2)
        with col_acc:
            st.metric("Accuracy", comparison.user_accuracy, delta=comparison.accuracy_delta,
                      help=f"Platform average: {comparison.platform_accuracy}")
        with col_eng:
            st.metric("Engagement", comparison.user_engagement, delta=comparison.engagement_delta,
                      help=f"Platform average: {comparison.platform_engagement}")


def render_overview(content: OverviewContent, catalog: Dict):
    col_main, col_side = st.columns([2, 1])
    with col_main:
        render_performance(content.performance, catalog)
    with col_side:
        render_insights(content.insights, catalog)


RENDERERS = {
    OverviewContent: render_overview,
    PerformanceContent: lambda c, catalog: render_performance(c.view, catalog),
    EngagementContent: lambda c, catalog: render_engagement(c.view, catalog),
    ProgressContent: lambda c, catalog: render_progress(c.view, catalog),
    InsightsContent: lambda c, catalog: render_insights(c.view, catalog),
}


def render_content(content: TabContent, catalog: Dict):
    RENDERERS[type(content)](content, catalog)
