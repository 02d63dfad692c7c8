"""
Unit tests for the view-model cache.
"""
from unittest.mock import MagicMock

import pytest

from learner_analytics.cache import ViewCache
from learner_analytics.models import AnalyticsPayload


class TestViewCache:

    @pytest.mark.unit
    def test_second_lookup_is_a_hit(self, sample_payload):
        cache = ViewCache()
        fn = MagicMock(return_value="view")

        assert cache.cached("performance", sample_payload, fn) == "view"
        assert cache.cached("performance", sample_payload, fn) == "view"

        fn.assert_called_once_with(sample_payload)
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    @pytest.mark.unit
    def test_none_results_are_cached(self):
        cache = ViewCache()
        fn = MagicMock(return_value=None)
        cache.cached("insights", None, fn)
        cache.cached("insights", None, fn)
        fn.assert_called_once()

    @pytest.mark.unit
    def test_new_payload_evicts_previous_entries(self, sample_raw, sample_payload):
        cache = ViewCache()
        cache.cached("performance", sample_payload, lambda p: "old")
        cache.cached("engagement", sample_payload, lambda p: "old")
        assert cache.stats()["entries"] == 2

        sample_raw["user_analytics"]["performance_metrics"]["accuracy_rate"] = 0.9
        newer = AnalyticsPayload.from_dict(sample_raw, timeframe_id="monthly")

        assert cache.cached("performance", newer, lambda p: "new") == "new"
        assert cache.stats()["entries"] == 1

    @pytest.mark.unit
    def test_equal_payloads_share_fingerprint(self, sample_raw):
        first = AnalyticsPayload.from_dict(sample_raw, timeframe_id="monthly")
        second = AnalyticsPayload.from_dict(sample_raw, timeframe_id="monthly")
        assert ViewCache.fingerprint(first) == ViewCache.fingerprint(second)
        assert ViewCache.fingerprint(first) != ViewCache.fingerprint(None)

    @pytest.mark.unit
    def test_clear_all(self, sample_payload):
        cache = ViewCache()
        fn = MagicMock(return_value="view")
        cache.cached("progress", sample_payload, fn)
        cache.clear_all()
        assert cache.stats()["entries"] == 0
        assert cache.stats()["fingerprint"] is None
        cache.cached("progress", sample_payload, fn)
        assert fn.call_count == 2
