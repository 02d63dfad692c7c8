"""
Checks that the display catalog and renderer table cover every tab.
"""
from pathlib import Path
from typing import get_args
from unittest.mock import patch

import pytest
import yaml

from dashboard.components import RENDERERS, metric_card, render_insights, tone_color
from learner_analytics.formatters import TIER_COLORS, TIER_GOOD
from learner_analytics.state import TAB_ORDER, TabContent
from learner_analytics.views import InsightsView, MetricCard

CATALOG_PATH = Path(__file__).parent.parent / "config" / "dashboard.yaml"


@pytest.fixture(scope="module")
def catalog():
    with open(CATALOG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class TestCatalog:

    @pytest.mark.unit
    def test_every_tab_has_label_and_icon(self, catalog):
        assert set(catalog["tabs"]) == {t.value for t in TAB_ORDER}
        for entry in catalog["tabs"].values():
            assert entry["label"] and entry["icon"]

    @pytest.mark.unit
    def test_messages(self, catalog):
        assert {"loading", "no_data", "no_insights", "no_recommendations"} <= set(catalog["messages"])


class TestRenderers:

    @pytest.mark.unit
    def test_every_content_variant_has_a_renderer(self):
        assert set(RENDERERS) == set(get_args(TabContent))

    @pytest.mark.unit
    def test_tone_color(self):
        assert tone_color(TIER_GOOD) == TIER_COLORS[TIER_GOOD]
        assert tone_color("unknown") == TIER_COLORS["info"]


class TestEscaping:

    @pytest.mark.unit
    def test_insight_text_is_escaped(self, catalog):
        """Verify backend free text cannot inject markup into the note HTML."""
        view = InsightsView(
            insights=("Score <b>dropped</b> on <hard> items</div>",),
            recommendations=(),
            comparison=None,
        )
        with patch("dashboard.components.st") as mock_st:
            render_insights(view, catalog)

        rendered = " ".join(c.args[0] for c in mock_st.markdown.call_args_list)
        assert "Score &lt;b&gt;dropped&lt;/b&gt; on &lt;hard&gt; items&lt;/div&gt;" in rendered
        assert "<hard>" not in rendered
        assert "<b>" not in rendered

    @pytest.mark.unit
    def test_metric_card_fields_are_escaped(self):
        card = MetricCard("<easy>", "90%", TIER_GOOD, "a & b")
        with patch("dashboard.components.st") as mock_st:
            metric_card(card)

        rendered = mock_st.markdown.call_args.args[0]
        assert "&lt;easy&gt;" in rendered
        assert "a &amp; b" in rendered
        assert "<easy>" not in rendered
